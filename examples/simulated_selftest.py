#!/usr/bin/env python3
"""
GPIO LCD Simulator Demo
=======================

This script demonstrates how to use the driver without hardware:
1. Wire a simulated GPIO backend to an HD44780 model
2. Load the driver and watch the self-test character appear
3. Open and release a handle through the device node
4. Unload the driver and inspect what the panel saw

Usage:
    source .venv/bin/activate
    python examples/simulated_selftest.py
"""

from gpio_lcd import DeviceNode, DeviceOperation, DriverConfig, LcdLifecycle
from gpio_lcd.hal import SimulatedPinController
from gpio_lcd.lcd import commands
from gpio_lcd.timing import VirtualClock


def show(panel):
    border = "+" + "-" * panel.num_columns + "+"
    print(border)
    for row in panel.get_text_grid():
        print("|" + row.ljust(panel.num_columns) + "|")
    print(border)


def main():
    # ==========================================================================
    # 1. Build the simulated hardware
    # ==========================================================================
    # The clock is shared by the backend, the panel and the driver, so Enable
    # pulse widths are measured in simulated time.

    config = DriverConfig()
    clock = VirtualClock()
    gpio = SimulatedPinController(clock=clock)
    panel = gpio.attach_panel(config.pins)

    # ==========================================================================
    # 2. Load the driver
    # ==========================================================================

    lcd = LcdLifecycle(gpio, config=config, clock=clock)
    lcd.start()

    print(f"State: {lcd.state.value}")
    print(f"Device node: /dev/{lcd.registration.node.name} (major {lcd.registration.major})")
    print(f"Pins held: {sorted(lcd.owned_pins)}")
    show(panel)

    # ==========================================================================
    # 3. Use the device node
    # ==========================================================================

    node = DeviceNode(lcd)
    handle = node.dispatch(DeviceOperation.OPEN)
    print(f"\nOpened handle {handle}")
    print(f"ioctl status: {node.dispatch(DeviceOperation.IOCTL, handle, cmd=1)}")
    node.dispatch(DeviceOperation.RELEASE, handle)
    print(f"Pins held after release: {sorted(lcd.owned_pins)}")

    # ==========================================================================
    # 4. Unload
    # ==========================================================================

    lcd.stop()
    print(f"\nState: {lcd.state.value}")
    show(panel)

    names = [commands.COMMAND_NAMES.get(value, f"0x{value:02X}") for value in panel.instructions()]
    print(f"Instructions seen by the panel: {', '.join(names)}")
    print(f"Simulated time: {clock.elapsed_us / 1000:.2f} ms")
    print(f"Timing violations: {len(panel.timing_violations)}")


if __name__ == "__main__":
    main()
