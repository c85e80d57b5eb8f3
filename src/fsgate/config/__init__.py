"""Configuration models and defaults for fsgate."""
