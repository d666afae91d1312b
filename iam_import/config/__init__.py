"""Configuration module for the user import tooling."""
from .settings import ImportConfig, load_settings

__all__ = ["ImportConfig", "load_settings"]
