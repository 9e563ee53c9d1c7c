"""
Device Node
===========

The ``/dev/lcd`` surface of the driver. The host hands every file
operation to ``DeviceNode.dispatch`` with one of a closed set of
operations and gets back a status integer:

    OPEN     handle id (>= 0), or -errno
    RELEASE  0, or -EBADF for a handle that is not open
    IOCTL    always -EINVAL (the driver defines no control codes)

No read or write operation exists; the node is only a way to hold and
release the display.
"""

import errno
import logging
from enum import Enum
from typing import Dict, Optional

from gpio_lcd.driver.lifecycle import DeviceHandle, LcdLifecycle
from gpio_lcd.errors import GpioLcdError

logger = logging.getLogger(__name__)


class DeviceOperation(Enum):
    """File operations supported by the device node."""
    OPEN = "open"
    RELEASE = "release"
    IOCTL = "ioctl"


class DeviceNode:
    """
    Adapter from host file operations to an LcdLifecycle.

    Args:
        lifecycle: The driver behind the node
    """

    supports_ioctl = False

    def __init__(self, lifecycle: LcdLifecycle):
        self.lifecycle = lifecycle
        self._handles: Dict[int, DeviceHandle] = {}

    @property
    def open_handle_ids(self) -> list[int]:
        return sorted(self._handles)

    def dispatch(
        self,
        operation: DeviceOperation,
        handle: Optional[int] = None,
        cmd: int = 0,
        arg: int = 0,
    ) -> int:
        """
        Perform a file operation.

        Args:
            operation: Which operation the host requested
            handle: Handle id (RELEASE and IOCTL)
            cmd: Control code (IOCTL)
            arg: Control argument (IOCTL)

        Returns:
            Operation result; negative values are -errno.
        """
        if operation is DeviceOperation.OPEN:
            try:
                device_handle = self.lifecycle.open()
            except GpioLcdError as e:
                logger.debug("open failed: %s", e)
                return e.status
            self._handles[device_handle.id] = device_handle
            return device_handle.id

        elif operation is DeviceOperation.RELEASE:
            device_handle = self._handles.pop(handle, None) if handle is not None else None
            if device_handle is None:
                logger.debug("release of unknown handle %s", handle)
                return -errno.EBADF
            self.lifecycle.release(device_handle)
            return 0

        elif operation is DeviceOperation.IOCTL:
            try:
                self.lifecycle.ioctl(DeviceHandle(-1 if handle is None else handle), cmd, arg)
            except GpioLcdError as e:
                return e.status
            return 0

        else:
            raise ValueError(f"Unknown device operation: {operation!r}")
