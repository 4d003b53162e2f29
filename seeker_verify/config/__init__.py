"""
Configuration management for seeker_verify.

Loads settings from environment variables and an optional .env file.
On-chain constants live in seeker_verify.config.constants.
"""

from seeker_verify.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
