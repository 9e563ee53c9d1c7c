"""
LCD Driver Lifecycle
====================

Owns every shared resource of the driver (device registration and the
seven LCD pins) and moves them through a fixed state machine:

    UNINITIALIZED --start()--> REGISTERED --> PINS_ACQUIRED --> READY
    READY / PINS_ACQUIRED --stop()--> SHUTTING_DOWN --> STOPPED

Any startup failure goes straight to STOPPED after unwinding whatever was
already created, so a failed start leaves no device node and no claimed
pin behind.

Locking
-------
A single re-entrant lock guards every change to pin ownership and every
multi-byte transfer: pin acquisition and release, the initialization
sequence, ``clear()`` and the shutdown clear. At most one thread is ever
mid-transfer or mid-transition.

Pin Ownership
-------------
Pins are acquired at start in the order RS, RW, E, DB4, DB5, DB6, DB7,
each configured as an output at level 0, and released in the same order.
The driver never drives a pin it does not hold: when a handle release has
already freed the pins, ``clear()`` and ``stop()`` reacquire them for the
duration of the transfer.

Release Policy
--------------
- UNCONDITIONAL: releasing any handle frees all pins, even if other
  handles are still open.
- REFCOUNTED: pins are freed when the last open handle is released and
  taken back by the next ``open()``.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Set

from gpio_lcd.config import DriverConfig, ReleasePolicy
from gpio_lcd.driver.registry import (
    CHRDEV_NAME,
    CLASS_NAME,
    NODE_MODE,
    NODE_NAME,
    DeviceRegistration,
    DeviceRegistry,
    InMemoryDeviceRegistry,
)
from gpio_lcd.errors import (
    InvalidArgumentError,
    LifecycleError,
    PinAcquisitionError,
    PinError,
    RegistrationError,
)
from gpio_lcd.hal.controller import PinController
from gpio_lcd.lcd import commands
from gpio_lcd.lcd.initializer import LcdInitializer
from gpio_lcd.lcd.transport import LcdTransport
from gpio_lcd.timing import BusyWaitClock, Clock

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """Driver lifecycle states."""
    UNINITIALIZED = "uninitialized"
    REGISTERED = "registered"
    PINS_ACQUIRED = "pins_acquired"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


@dataclass(frozen=True)
class DeviceHandle:
    """An open handle on the device node."""
    id: int


class LcdLifecycle:
    """
    The LCD driver: registration, pins, initialization and teardown.

    Args:
        controller: PinController for the LCD pins
        registry: Host device registry (in-memory by default)
        config: Driver configuration (defaults if omitted)
        clock: Delay source (real busy-wait clock by default)

    Example:
        >>> from gpio_lcd.hal import SimulatedPinController
        >>> from gpio_lcd.timing import VirtualClock
        >>> clock = VirtualClock()
        >>> lcd = LcdLifecycle(SimulatedPinController(clock=clock), clock=clock)
        >>> lcd.start()
        >>> lcd.state
        <LifecycleState.READY: 'ready'>
        >>> lcd.stop()
    """

    def __init__(
        self,
        controller: PinController,
        registry: Optional[DeviceRegistry] = None,
        config: Optional[DriverConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config if config is not None else DriverConfig()
        self.controller = controller
        self.registry = registry if registry is not None else InMemoryDeviceRegistry()
        self.clock = clock if clock is not None else BusyWaitClock()

        self.transport = LcdTransport(
            controller, self.config.pins, self.clock, self.config.pulse_width_us
        )
        self.initializer = LcdInitializer(
            self.transport, self.config.self_test, self.config.self_test_char
        )

        self._lock = threading.RLock()
        self._state = LifecycleState.UNINITIALIZED
        self._registration: Optional[DeviceRegistration] = None
        self._owned: Set[int] = set()
        self._handles: Set[int] = set()
        self._handle_ids = itertools.count(1)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def registration(self) -> Optional[DeviceRegistration]:
        return self._registration

    @property
    def owned_pins(self) -> FrozenSet[int]:
        """Physical pins currently held by the driver."""
        with self._lock:
            return frozenset(self._owned)

    @property
    def pins_owned(self) -> bool:
        """True when all seven LCD pins are held."""
        with self._lock:
            return len(self._owned) == len(self.config.pins.as_dict())

    @property
    def open_handles(self) -> int:
        with self._lock:
            return len(self._handles)

    # =========================================================================
    # Module Start / Stop
    # =========================================================================

    def start(self) -> None:
        """
        Register the device, acquire the pins and initialize the display.

        Raises:
            LifecycleError: If the driver was already started.
            RegistrationError: If device registration fails.
            PinAcquisitionError: If any LCD pin cannot be acquired.
        """
        with self._lock:
            if self._state is not LifecycleState.UNINITIALIZED:
                raise LifecycleError(f"Cannot start driver in state {self._state.value}")

            logger.info("GPIO LCD driver starting")

            try:
                self._register()
            except RegistrationError as e:
                self._state = LifecycleState.STOPPED
                logger.error("Device registration failed: %s", e)
                raise
            self._state = LifecycleState.REGISTERED

            try:
                self._acquire_pins()
            except PinAcquisitionError as e:
                self._unregister()
                self._state = LifecycleState.STOPPED
                logger.error("%s", e)
                raise
            self._state = LifecycleState.PINS_ACQUIRED

            self.initializer.run()
            self.transport.set_register_select(0)
            self._state = LifecycleState.READY
            logger.info("GPIO LCD driver ready (/dev/%s, major %d)", NODE_NAME, self._registration.major)

    def stop(self, clear: bool = True) -> None:
        """
        Clear the display, free the pins and tear down the registration.

        Safe to call more than once; calling it before ``start()`` just
        marks the driver stopped.

        Args:
            clear: Send CLEAR before releasing the pins (best effort)
        """
        with self._lock:
            if self._state in (LifecycleState.STOPPED, LifecycleState.SHUTTING_DOWN):
                return
            if self._state is LifecycleState.UNINITIALIZED:
                self._state = LifecycleState.STOPPED
                return

            logger.info("GPIO LCD driver stopping")
            self._state = LifecycleState.SHUTTING_DOWN

            if clear:
                self._clear_best_effort()
            self._free_pins()
            self._handles.clear()
            self._unregister()

            self._state = LifecycleState.STOPPED
            logger.info("GPIO LCD driver stopped")

    def __enter__(self) -> "LcdLifecycle":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # =========================================================================
    # Device Operations
    # =========================================================================

    def open(self) -> DeviceHandle:
        """
        Open a handle on the device. Any number of handles may be open.

        Under REFCOUNTED, the first open after the last release took the
        pins back from the driver reacquires them.

        Raises:
            LifecycleError: If the driver is not READY.
            PinAcquisitionError: If freed pins cannot be reacquired.
        """
        with self._lock:
            if self._state is not LifecycleState.READY:
                raise LifecycleError(f"Cannot open device in state {self._state.value}")
            if self.config.release_policy is ReleasePolicy.REFCOUNTED and not self.pins_owned:
                self._acquire_pins()
            handle = DeviceHandle(next(self._handle_ids))
            self._handles.add(handle.id)
            logger.debug("Opened handle %d (%d open)", handle.id, len(self._handles))
            return handle

    def release(self, handle: DeviceHandle) -> None:
        """
        Close a handle and free the pins according to the release policy.

        Always succeeds; freeing pins that are already free is a no-op.
        """
        with self._lock:
            self._handles.discard(handle.id)
            logger.debug("Released handle %d (%d open)", handle.id, len(self._handles))

            if self.config.release_policy is ReleasePolicy.REFCOUNTED and self._handles:
                return
            self._free_pins()

    def ioctl(self, handle: DeviceHandle, cmd: int, arg: int = 0) -> int:
        """
        Control request. No control codes exist, so this always fails.

        Raises:
            InvalidArgumentError: Always.
        """
        logger.debug("Rejected control request 0x%X on handle %d", cmd, handle.id)
        raise InvalidArgumentError(cmd)

    def clear(self) -> bool:
        """
        Send the clear-display instruction.

        Reacquires the pins for the transfer if a handle release freed them.

        Returns:
            True if the transfer went through without pin write errors.

        Raises:
            LifecycleError: If the driver is not READY.
            PinAcquisitionError: If freed pins cannot be reacquired.
        """
        with self._lock:
            if self._state is not LifecycleState.READY:
                raise LifecycleError(f"Cannot clear display in state {self._state.value}")
            transient = not self.pins_owned
            if transient:
                self._acquire_pins()
            try:
                return self._send_instruction(commands.CLEAR)
            finally:
                if transient:
                    self._free_pins()

    # =========================================================================
    # Internals (caller holds the lock)
    # =========================================================================

    def _send_instruction(self, command: int) -> bool:
        ok = self.transport.set_register_select(0)
        return self.transport.send_byte(command) and ok

    def _clear_best_effort(self) -> None:
        if not self.pins_owned:
            try:
                self._acquire_pins()
            except PinAcquisitionError as e:
                logger.warning("Skipping display clear on shutdown: %s", e)
                return
        if not self._send_instruction(commands.CLEAR):
            logger.warning("Display clear on shutdown reported transfer errors")

    def _register(self) -> None:
        registry = self.registry
        major = registry.register_chrdev(CHRDEV_NAME)
        try:
            device_class = registry.class_create(CLASS_NAME)
        except RegistrationError:
            registry.unregister_chrdev(major, CHRDEV_NAME)
            raise
        try:
            node = registry.device_create(device_class, major, 0, NODE_NAME, NODE_MODE)
        except RegistrationError:
            registry.class_destroy(device_class)
            registry.unregister_chrdev(major, CHRDEV_NAME)
            raise
        self._registration = DeviceRegistration(major, device_class, node)
        logger.info("Registered char device %s (major %d)", CHRDEV_NAME, major)

    def _unregister(self) -> None:
        registration = self._registration
        if registration is None:
            return
        self.registry.device_destroy(registration.device_class, registration.major, 0)
        self.registry.class_destroy(registration.device_class)
        self.registry.unregister_chrdev(registration.major, CHRDEV_NAME)
        self._registration = None
        logger.debug("Unregistered char device %s", CHRDEV_NAME)

    def _acquire_pins(self) -> None:
        """Acquire every LCD pin as a low output, or none of them."""
        try:
            for signal, pin in self.config.pins.items():
                if pin in self._owned:
                    continue
                self.controller.acquire(pin, signal.value)
                self._owned.add(pin)
                try:
                    self.controller.set_output(pin, 0)
                except PinError as e:
                    raise PinAcquisitionError(
                        pin, f"Cannot configure GPIO {pin} as output: {e}", signal.value
                    ) from e
                logger.debug("Acquired GPIO %d as %s", pin, signal.value)
        except PinAcquisitionError:
            self._free_pins()
            raise

    def _free_pins(self) -> None:
        for signal, pin in self.config.pins.items():
            if pin not in self._owned:
                continue
            try:
                self.controller.release(pin)
            except PinError as e:
                logger.warning("Error releasing GPIO %d (%s): %s", pin, signal.value, e)
            self._owned.discard(pin)
        logger.debug("LCD pins free")
