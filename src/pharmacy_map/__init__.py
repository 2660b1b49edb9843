"""Pharmacy density by electoral section in Mexico."""

__version__ = "0.1.0"
