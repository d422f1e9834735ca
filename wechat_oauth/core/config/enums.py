"""Configuration enums for type-safe settings.

They inherit from str to maintain JSON serialization compatibility.
"""

from enum import Enum


class Environment(str, Enum):
    """Deployment environments.

    Controls environment-specific behavior like log formatting.
    """

    LOCAL = "local"
    TEST = "test"
    DEV = "dev"
    PRD = "prd"


class TokenMethod(str, Enum):
    """HTTP methods a token endpoint may be configured with.

    WeChat only accepts GET; the others exist so a misconfigured value can be
    recognised and reported instead of silently sent.
    """

    GET = "get"
    POST = "post"
