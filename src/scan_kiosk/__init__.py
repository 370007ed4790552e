"""Single-use QR tokens for a kiosk poster, with daily scan counters."""
