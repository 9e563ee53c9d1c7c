"""
Module Hooks
============

Load and unload entry points for the driver. ``module_init`` builds the
single driver instance, starts it and publishes its device node;
``module_exit`` stops it. Both report to the host with 0 or a negative
errno value.

Example:
    >>> from gpio_lcd.driver import module
    >>> status = module.module_init()
    >>> node = module.current_node()
    >>> module.module_exit()
    0
"""

import errno
import logging
from typing import Optional

from gpio_lcd.config import DriverConfig
from gpio_lcd.driver.device import DeviceNode
from gpio_lcd.driver.lifecycle import LcdLifecycle, LifecycleState
from gpio_lcd.driver.registry import DeviceRegistry
from gpio_lcd.errors import GpioLcdError
from gpio_lcd.hal import PinController, create_controller
from gpio_lcd.timing import Clock

logger = logging.getLogger(__name__)

_driver: Optional[LcdLifecycle] = None
_node: Optional[DeviceNode] = None


def module_init(
    config: Optional[DriverConfig] = None,
    controller: Optional[PinController] = None,
    registry: Optional[DeviceRegistry] = None,
    clock: Optional[Clock] = None,
) -> int:
    """
    Load the driver.

    Args:
        config: Driver configuration (read from the environment if omitted)
        controller: Pin controller (lgpio backend on ``config.chip`` if omitted)
        registry: Device registry (in-memory if omitted)
        clock: Delay source (busy-wait clock if omitted)

    Returns:
        0 on success, -errno on failure: -EINVAL for a bad environment
        value, -ENODEV when the GPIO backend cannot be imported, or the
        status of the startup error. A failed load leaves nothing
        registered and no pin claimed.
    """
    global _driver, _node

    if _driver is not None and _driver.state is not LifecycleState.STOPPED:
        logger.error("GPIO LCD driver already loaded")
        return -errno.EBUSY

    try:
        if config is None:
            config = DriverConfig.from_env()
        if controller is None:
            controller = create_controller(chip=config.chip)
    except ValueError as e:
        logger.error("GPIO LCD driver configuration error: %s", e)
        return -errno.EINVAL
    except ImportError as e:
        logger.error("GPIO LCD driver backend unavailable: %s", e)
        return -errno.ENODEV

    driver = LcdLifecycle(controller, registry=registry, config=config, clock=clock)
    try:
        driver.start()
    except GpioLcdError as e:
        logger.error("GPIO LCD driver failed to load: %s", e)
        controller.close()
        return e.status

    _driver = driver
    _node = DeviceNode(driver)
    return 0


def module_exit() -> int:
    """Unload the driver. Unloading when nothing is loaded is a no-op."""
    global _driver, _node

    driver = _driver
    if driver is None:
        return 0
    driver.stop()
    driver.controller.close()
    _driver = None
    _node = None
    return 0


def current_driver() -> Optional[LcdLifecycle]:
    return _driver


def current_node() -> Optional[DeviceNode]:
    """Device node of the loaded driver, or None."""
    return _node
