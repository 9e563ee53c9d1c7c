"""
Driver Layer
============

- **registry**: character device, class and node registration
- **lifecycle**: the LcdLifecycle state machine owning pins and registration
- **device**: the device-node adapter (open / release / ioctl)
- **module**: load and unload hooks around a single driver instance
"""

from gpio_lcd.driver.device import DeviceNode, DeviceOperation
from gpio_lcd.driver.lifecycle import DeviceHandle, LcdLifecycle, LifecycleState
from gpio_lcd.driver.module import current_node, module_exit, module_init
from gpio_lcd.driver.registry import (
    DeviceRegistration,
    DeviceRegistry,
    InMemoryDeviceRegistry,
)

__all__ = [
    "DeviceNode",
    "DeviceOperation",
    "DeviceHandle",
    "LcdLifecycle",
    "LifecycleState",
    "module_init",
    "module_exit",
    "current_node",
    "DeviceRegistration",
    "DeviceRegistry",
    "InMemoryDeviceRegistry",
]
