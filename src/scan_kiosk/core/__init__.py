"""Core configuration for the kiosk service."""
