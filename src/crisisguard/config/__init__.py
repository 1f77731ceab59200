"""
CRISISGUARD Configuration Module

Provides centralized configuration management with:
- Environment-based settings loading
- Validation of thresholds and timeouts
- Secure handling of secrets
"""

from crisisguard.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
