"""MobiQ — element resolution and interaction-retry engine for mobile UI tests."""

__version__ = "0.1.0"
