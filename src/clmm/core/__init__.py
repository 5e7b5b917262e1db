"""Core state, configuration and periphery contracts."""
