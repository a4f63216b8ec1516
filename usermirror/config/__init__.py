"""Configuration module for usermirror."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
