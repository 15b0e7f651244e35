"""Runnable tinyflux examples."""
