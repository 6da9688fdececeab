"""Core building blocks: pagination, settings, errors and store adapters."""
