"""User-facing entry points for legacymod."""
