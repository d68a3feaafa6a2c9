"""
Device inventory for network monitor.

Provides in-memory CRUD operations for monitored devices. Health fields are
owned by the health tracker and cannot be set through this interface.
"""

import itertools
import logging
import threading
import time
from typing import Any, Iterable, Optional

from netpulse.core.config import DeviceEntry
from netpulse.core.models import Device

logger = logging.getLogger(__name__)


class DeviceInventory:
    """Thread-safe in-memory store of monitored devices."""

    def __init__(self, entries: Optional[Iterable[DeviceEntry]] = None):
        """
        Initialize inventory.

        Args:
            entries: Optional devices to seed the inventory with
        """
        self.lock = threading.RLock()
        self._devices: list[Device] = []
        self._counter = itertools.count(1)

        for entry in entries or []:
            self.add(
                name=entry.name,
                address=entry.address,
                category=entry.category,
                vendor=entry.vendor,
                location=entry.location,
            )

    def _next_id(self) -> str:
        # Millisecond timestamp plus a counter keeps ids unique within a burst
        return f"{int(time.time() * 1000)}-{next(self._counter)}"

    def get_all_devices(self) -> list[Device]:
        """Return the live device records (mutated in place by polling)."""
        with self.lock:
            return list(self._devices)

    def get(self, device_id: str) -> Optional[Device]:
        """Get device by ID."""
        with self.lock:
            for device in self._devices:
                if device.id == device_id:
                    return device
        return None

    def add(
        self,
        name: str,
        address: str,
        category: Optional[str] = None,
        vendor: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Device:
        """
        Add a new device with zeroed health state.

        Args:
            name: Display name
            address: Hostname or IP address to probe
            category: Optional category (default: physical-server)
            vendor: Optional vendor
            location: Optional location

        Returns:
            Created Device instance

        Raises:
            ValueError: If name or address is empty
        """
        name = (name or "").strip()
        address = (address or "").strip()
        if not name:
            raise ValueError("name is required")
        if not address:
            raise ValueError("address is required")

        with self.lock:
            device = Device(
                id=self._next_id(),
                name=name,
                address=address,
                category=category or "physical-server",
                vendor=vendor or None,
                location=location or None,
            )
            self._devices.append(device)

        logger.info(f"Added device {device.name} ({device.address})")
        return device

    def update(self, device_id: str, **fields: Any) -> Optional[Device]:
        """
        Update descriptive fields of a device.

        Empty name, address, or category values keep the current value;
        vendor and location may be cleared with None or "".

        Args:
            device_id: Device ID
            **fields: Fields to update (unknown and health fields are ignored)

        Returns:
            Updated Device, or None if not found
        """
        with self.lock:
            device = self.get(device_id)
            if device is None:
                return None

            for key in ("name", "address", "category"):
                value = fields.get(key)
                if isinstance(value, str) and value.strip():
                    setattr(device, key, value.strip())

            for key in ("vendor", "location"):
                if key in fields:
                    setattr(device, key, fields[key] or None)

            return device

    def delete(self, device_id: str) -> bool:
        """
        Remove a device entirely.

        Returns:
            True if the device existed
        """
        with self.lock:
            for index, device in enumerate(self._devices):
                if device.id == device_id:
                    del self._devices[index]
                    logger.info(f"Deleted device {device.name} ({device.address})")
                    return True
        return False

    def snapshot(self) -> list[dict[str, Any]]:
        """Return a consistent JSON-serializable view of all devices."""
        with self.lock:
            return [d.to_dict() for d in self._devices]

    def __len__(self) -> int:
        with self.lock:
            return len(self._devices)
