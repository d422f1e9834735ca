"""Configuration module for the WeChat OAuth client.

Usage:
    from wechat_oauth.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from wechat_oauth.core.config.enums import Environment, TokenMethod
from wechat_oauth.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "TokenMethod",
    "settings",
]

# Singleton settings instance
settings = Settings()
