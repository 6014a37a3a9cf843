"""Delivery rates: billing records derived from delivery lifecycle events."""
