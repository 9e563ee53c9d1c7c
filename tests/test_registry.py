"""
Device Registry Unit Tests
==========================

Tests for the in-memory registry standing in for the host's character
device, class and node facilities.
"""

import errno

import pytest

from gpio_lcd.driver.registry import DeviceClass, InMemoryDeviceRegistry
from gpio_lcd.errors import RegistrationError


class TestInMemoryRegistry:
    """Test registration and teardown."""

    def test_majors_start_at_240(self):
        """Major numbers are handed out from 240 upwards."""
        registry = InMemoryDeviceRegistry()
        assert registry.register_chrdev("a") == 240
        assert registry.register_chrdev("b") == 241

    def test_full_registration(self):
        """chrdev, class and node can be created and destroyed."""
        registry = InMemoryDeviceRegistry()
        major = registry.register_chrdev("gpio_lcd")
        device_class = registry.class_create("lcd_class")
        node = registry.device_create(device_class, major, 0, "lcd", 0o666)
        assert node.name == "lcd"
        assert registry.node_names() == ["lcd"]

        registry.device_destroy(device_class, major, 0)
        registry.class_destroy(device_class)
        registry.unregister_chrdev(major, "gpio_lcd")
        assert registry.is_empty

    def test_duplicate_class(self):
        """Creating the same class twice fails."""
        registry = InMemoryDeviceRegistry()
        registry.class_create("lcd_class")
        with pytest.raises(RegistrationError):
            registry.class_create("lcd_class")

    def test_node_needs_class(self):
        """A node cannot be created for a class that does not exist."""
        registry = InMemoryDeviceRegistry()
        major = registry.register_chrdev("gpio_lcd")
        with pytest.raises(RegistrationError):
            registry.device_create(DeviceClass("missing"), major, 0, "lcd", 0o666)

    @pytest.mark.parametrize("step", InMemoryDeviceRegistry.STEPS)
    def test_fault_injection(self, step):
        """Each step can be made to fail with ENODEV."""
        registry = InMemoryDeviceRegistry(fail_steps={step})
        with pytest.raises(RegistrationError) as exc_info:
            major = registry.register_chrdev("gpio_lcd")
            device_class = registry.class_create("lcd_class")
            registry.device_create(device_class, major, 0, "lcd", 0o666)
        assert exc_info.value.step == step
        assert exc_info.value.status == -errno.ENODEV

    def test_unknown_step(self):
        """Unknown fault-injection steps are rejected."""
        with pytest.raises(ValueError):
            InMemoryDeviceRegistry(fail_steps={"firmware"})

    def test_teardown_of_missing_objects(self):
        """Destroying things that do not exist is harmless."""
        registry = InMemoryDeviceRegistry()
        registry.device_destroy(DeviceClass("lcd_class"), 240, 0)
        registry.class_destroy(DeviceClass("lcd_class"))
        registry.unregister_chrdev(240, "gpio_lcd")
        assert registry.is_empty
