"""Framework adapters for serving jsConnect handshakes."""
