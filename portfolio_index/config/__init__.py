"""Configuration package for the performance index builder."""

from .settings import IndexSettings, get_settings

__all__ = ["IndexSettings", "get_settings"]
