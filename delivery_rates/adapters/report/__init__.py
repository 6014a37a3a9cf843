"""Rate report adapters."""
