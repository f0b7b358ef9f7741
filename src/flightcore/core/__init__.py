"""Core infrastructure: configuration, logging, events and the main loop."""
