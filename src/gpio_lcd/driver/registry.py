"""
Device Registration
===================

The host side of the driver: a character-device identifier, a device
class and a device node. On Linux these are register_chrdev(),
class_create() and device_create(); here they are modelled by the
DeviceRegistry interface so the lifecycle can be exercised anywhere.

``InMemoryDeviceRegistry`` keeps the registration in a dict and supports
fault injection at each of the three steps.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Final, Optional, Set

from gpio_lcd.errors import RegistrationError

logger = logging.getLogger(__name__)

CHRDEV_NAME: Final[str] = "gpio_lcd"
CLASS_NAME: Final[str] = "lcd_class"
NODE_NAME: Final[str] = "lcd"
NODE_MODE: Final[int] = 0o666


@dataclass(frozen=True)
class DeviceClass:
    name: str


@dataclass(frozen=True)
class DeviceNodeInfo:
    name: str
    major: int
    minor: int
    mode: int


@dataclass(frozen=True)
class DeviceRegistration:
    """
    Everything created at module start, torn down at module stop.

    Attributes:
        major: Character-device major number
        device_class: Class handle
        node: Device-node handle
    """
    major: int
    device_class: DeviceClass
    node: DeviceNodeInfo


class DeviceRegistry(ABC):
    """Host facility for character devices, classes and nodes."""

    @abstractmethod
    def register_chrdev(self, name: str) -> int:
        """Allocate a major number. Raises RegistrationError."""
        pass

    @abstractmethod
    def unregister_chrdev(self, major: int, name: str) -> None:
        pass

    @abstractmethod
    def class_create(self, name: str) -> DeviceClass:
        """Raises RegistrationError."""
        pass

    @abstractmethod
    def class_destroy(self, device_class: DeviceClass) -> None:
        pass

    @abstractmethod
    def device_create(
        self, device_class: DeviceClass, major: int, minor: int, name: str, mode: int
    ) -> DeviceNodeInfo:
        """Raises RegistrationError."""
        pass

    @abstractmethod
    def device_destroy(self, device_class: DeviceClass, major: int, minor: int) -> None:
        pass


class InMemoryDeviceRegistry(DeviceRegistry):
    """
    DeviceRegistry that lives in a few dicts.

    Args:
        first_major: First major number handed out
        fail_steps: Steps that should fail; any of "chrdev", "class", "node"
    """

    STEPS: Final[tuple[str, ...]] = ("chrdev", "class", "node")

    def __init__(self, first_major: int = 240, fail_steps: Optional[Set[str]] = None):
        self._next_major = first_major
        self.fail_steps: Set[str] = set(fail_steps or ())
        unknown = self.fail_steps - set(self.STEPS)
        if unknown:
            raise ValueError(f"Unknown registration steps: {sorted(unknown)}")

        self.chrdevs: Dict[int, str] = {}
        self.classes: Dict[str, DeviceClass] = {}
        self.nodes: Dict[tuple[int, int], DeviceNodeInfo] = {}

    def register_chrdev(self, name: str) -> int:
        if "chrdev" in self.fail_steps:
            raise RegistrationError("chrdev", f"Cannot register char device {name}")
        major = self._next_major
        self._next_major += 1
        self.chrdevs[major] = name
        logger.debug("Registered char device %s with major %d", name, major)
        return major

    def unregister_chrdev(self, major: int, name: str) -> None:
        registered = self.chrdevs.get(major)
        if registered is None:
            return
        if registered != name:
            logger.warning("Unregistering major %d as %s, registered as %s", major, name, registered)
        del self.chrdevs[major]

    def class_create(self, name: str) -> DeviceClass:
        if "class" in self.fail_steps:
            raise RegistrationError("class", f"Cannot create device class {name}")
        if name in self.classes:
            raise RegistrationError("class", f"Device class {name} already exists")
        device_class = DeviceClass(name)
        self.classes[name] = device_class
        return device_class

    def class_destroy(self, device_class: DeviceClass) -> None:
        self.classes.pop(device_class.name, None)

    def device_create(
        self, device_class: DeviceClass, major: int, minor: int, name: str, mode: int
    ) -> DeviceNodeInfo:
        if "node" in self.fail_steps:
            raise RegistrationError("node", f"Cannot create device node {name}")
        if device_class.name not in self.classes:
            raise RegistrationError("node", f"Device class {device_class.name} does not exist")
        node = DeviceNodeInfo(name, major, minor, mode)
        self.nodes[(major, minor)] = node
        return node

    def device_destroy(self, device_class: DeviceClass, major: int, minor: int) -> None:
        self.nodes.pop((major, minor), None)

    @property
    def is_empty(self) -> bool:
        """True when nothing is registered."""
        return not (self.chrdevs or self.classes or self.nodes)

    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes.values()]
