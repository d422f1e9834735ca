"""Protocols for OAuth domain dependencies."""

from typing import Any, Dict, Mapping, Optional, Protocol

from wechat_oauth.domains.oauth.client_factory import ClientConfig
from wechat_oauth.domains.oauth.types import AccessToken


class ClientConfigProvider(Protocol):
    """Source of process-wide client options, read once at startup."""

    def get_options(self) -> Mapping[str, Any]:
        """Return the configured client options.

        Keys are ``ClientConfig`` field names; absent keys fall back to the
        built-in defaults.
        """
        ...


class WeChatOAuth2ServiceProtocol(Protocol):
    """WeChat OAuth2 authorization code capability."""

    def client(self, **overrides: Any) -> ClientConfig:
        """Build a client configuration for one flow."""
        ...

    def authorize_url(
        self, config: ClientConfig, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        """Build the WeChat authorization redirect URL."""
        ...

    async def get_token(
        self,
        config: ClientConfig,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AccessToken:
        """Exchange an authorization code for an access token."""
        ...

    async def get(
        self,
        config: ClientConfig,
        token: AccessToken,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Call a WeChat API endpoint on behalf of the token's user."""
        ...
