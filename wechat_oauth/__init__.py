"""WeChat OAuth2 authorization code client."""

from wechat_oauth.core.exceptions import (
    ConfigurationError,
    DecodeError,
    MissingCodeError,
    ProviderError,
    TransportError,
    WeChatOAuthException,
)
from wechat_oauth.domains.oauth.client_factory import ClientConfig, ClientFactory
from wechat_oauth.domains.oauth.oauth2_service import WeChatOAuth2Service
from wechat_oauth.domains.oauth.types import AccessToken

__all__ = [
    "AccessToken",
    "ClientConfig",
    "ClientFactory",
    "WeChatOAuth2Service",
    "WeChatOAuthException",
    "ConfigurationError",
    "DecodeError",
    "MissingCodeError",
    "ProviderError",
    "TransportError",
]
