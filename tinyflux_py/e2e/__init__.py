"""End-to-end scenarios for tinyflux-py."""
