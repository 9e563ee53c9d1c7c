"""
GPIO LCD Command-Line Interface
===============================

This package provides the command-line tool for the driver:

- **gpiolcd**: show the wiring, run the self-test, clear the display

The tool is a Click-based CLI application and can run against real GPIO
(through lgpio) or against the in-memory simulator with ``--simulate``.
"""

__all__ = ["gpiolcd"]
