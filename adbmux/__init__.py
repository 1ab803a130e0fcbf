"""Multiplex adb operations across attached Android devices."""

__version__ = "0.1.0"
