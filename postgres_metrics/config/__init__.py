"""Plugin configuration."""
