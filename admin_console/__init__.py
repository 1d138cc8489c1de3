"""Moderation and paginated query engine for the device-donation admin console."""

__version__ = "0.1.0"
