"""Infrastructure adapters shared across the service."""
