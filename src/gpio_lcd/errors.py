"""
GPIO LCD Error Hierarchy
========================

This module defines the exception hierarchy for the whole driver.
All exceptions inherit from GpioLcdError, allowing callers to catch all
driver-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
GpioLcdError (base)
├── RegistrationError - device identifier, class or node creation failed
├── PinError - any failure reported by a PinController
│   ├── PinAcquisitionError - a physical pin could not be claimed
│   └── PinWriteError - a level write failed during a transfer
├── LifecycleError - operation not valid in the current lifecycle state
└── InvalidArgumentError - control request (always rejected)

Host Status Codes
-----------------
The module hooks and the device-node adapter report to their host with a
signed integer: 0 for success, a negative errno value for failure. Every
exception here carries the errno it maps to, so the conversion is just
``-error.errno`` (see ``GpioLcdError.status``).
"""

import errno as _errno
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class GpioLcdError(Exception):
    """
    Base exception for all GPIO LCD driver errors.

    All exceptions in the driver inherit from this class, allowing callers
    to catch all driver-related errors with a single except clause:

        try:
            lifecycle.start()
        except GpioLcdError as e:
            print(f"Error: {e}")

    Attributes:
        errno: Positive errno value reported to the host on failure
    """

    errno: int = _errno.EIO

    @property
    def status(self) -> int:
        """Host-convention status code (negative errno)."""
        return -self.errno


# =============================================================================
# Registration Exceptions
# =============================================================================

class RegistrationError(GpioLcdError):
    """
    Device registration failed.

    Raised when:
    - No character-device identifier could be allocated
    - The device class could not be created
    - The device node could not be created

    The lifecycle unwinds any partial registration before this propagates,
    so a failed start never leaves a device node behind.
    """

    errno = _errno.ENODEV

    def __init__(self, step: str, message: str = ""):
        self.step = step
        if not message:
            message = f"device registration failed at step '{step}'"
        super().__init__(message)


# =============================================================================
# Pin Exceptions
# =============================================================================

class PinError(GpioLcdError):
    """
    Base exception for PinController failures.

    Attributes:
        pin: Physical pin number involved
        label: Logical signal name (e.g. "RS", "DB4"), if known
    """

    errno = _errno.EIO

    def __init__(self, pin: int, message: str = "", label: Optional[str] = None):
        self.pin = pin
        self.label = label
        if not message:
            message = f"GPIO {pin} failed"
        if label:
            message = f"{message} ({label})"
        super().__init__(message)


class PinAcquisitionError(PinError):
    """
    A physical pin could not be acquired.

    Raised when:
    - The pin is already claimed by another driver or process
    - The pin does not exist on the GPIO chip
    - Permission to the GPIO chip is denied

    This is fatal to startup. Pins acquired before the failing one are
    released before the error reaches the caller.
    """

    errno = _errno.EBUSY

    def __init__(self, pin: int, message: str = "", label: Optional[str] = None):
        if not message:
            message = f"GPIO request failure: pin {pin}"
        super().__init__(pin, message, label)


class PinWriteError(PinError):
    """
    Writing a level to an acquired pin failed.

    The display has no channel to report errors back, so the transport
    treats this as best-effort: it is logged and counted, never raised
    past ``LcdTransport.send_byte``.
    """

    def __init__(self, pin: int, message: str = "", label: Optional[str] = None):
        if not message:
            message = f"GPIO write failure: pin {pin}"
        super().__init__(pin, message, label)


# =============================================================================
# Lifecycle and Request Exceptions
# =============================================================================

class LifecycleError(GpioLcdError):
    """
    Operation is not valid in the current lifecycle state.

    Raised when, for example, ``start()`` is called twice or ``open()`` is
    called before the driver reached the READY state.
    """

    errno = _errno.EPERM


class InvalidArgumentError(GpioLcdError):
    """
    Control request rejected.

    No control codes are implemented, so every request on a device handle
    fails with this error. It never affects pin ownership or registration,
    and the handle stays usable.
    """

    errno = _errno.EINVAL

    def __init__(self, cmd: int, message: str = ""):
        self.cmd = cmd
        if not message:
            message = f"unsupported control request 0x{cmd:X}"
        super().__init__(message)
