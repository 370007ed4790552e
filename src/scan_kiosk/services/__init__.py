"""Business logic services for the kiosk."""
