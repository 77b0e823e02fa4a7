"""Core configuration, types and errors."""
