"""Client configuration for WeChat OAuth2.

A ``ClientConfig`` is built fresh for every flow by layering, in order of
increasing priority:

1. the built-in WeChat endpoints (``DEFAULTS``),
2. the process-wide options loaded once at startup,
3. the caller's overrides.

Nothing is validated here. Missing credentials only surface when a token
exchange is attempted.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional
from urllib.parse import urlsplit

from wechat_oauth.core.config import Settings, settings

if TYPE_CHECKING:
    from wechat_oauth.domains.oauth.protocols import ClientConfigProvider

DEFAULTS: Mapping[str, Any] = MappingProxyType(
    {
        "site": "https://api.weixin.qq.com/sns",
        "authorize_url": "https://open.weixin.qq.com/connect/oauth2/authorize",
        "token_url": "/oauth2/access_token",
        "token_method": "get",
    }
)


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to build requests to WeChat for one flow.

    Attributes:
        site: Base URL that relative endpoints are resolved against
        authorize_url: Authorization endpoint the user is redirected to
        token_url: Token endpoint, relative to ``site`` or absolute
        token_method: Configured HTTP method for the token endpoint
        client_id: WeChat ``appid``
        client_secret: WeChat ``secret``
        redirect_uri: Callback URL registered with WeChat
        params: Extra parameters attached to every request built from this config
        headers: Extra headers attached to every request issued with this config
        timeout: Timeout in seconds for outbound requests
    """

    site: str
    authorize_url: str
    token_url: str
    token_method: str = "get"
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: Optional[str] = None
    params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = 10.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def with_params(self, **params: Any) -> "ClientConfig":
        """Return a copy with ``params`` attached on top of the current ones."""
        return replace(self, params={**self.params, **params})

    def resolve_url(self, url: str) -> str:
        """Resolve ``url`` against ``site`` unless it is already absolute."""
        parts = urlsplit(url)
        if parts.scheme and parts.netloc:
            return url
        return f"{self.site.rstrip('/')}/{url.lstrip('/')}"


class SettingsConfigProvider:
    """Client options taken from the process settings.

    The options are captured when the provider is created and never re-read.
    """

    def __init__(self, app_settings: Settings) -> None:
        """Snapshot the OAuth options from ``app_settings``."""
        self._options = MappingProxyType(app_settings.oauth_client_options())

    def get_options(self) -> Mapping[str, Any]:
        """Return the captured options."""
        return self._options


class ClientFactory:
    """Merges defaults, process options and overrides into a ``ClientConfig``."""

    def __init__(self, provider: Optional["ClientConfigProvider"] = None) -> None:
        """Initialize with the process-wide option provider."""
        self.provider = provider or SettingsConfigProvider(settings)

    def client(self, **overrides: Any) -> ClientConfig:
        """Construct a client configuration for requests to WeChat.

        Args:
            **overrides: ``ClientConfig`` fields that take precedence over both
                the process options and the defaults

        Returns:
            ClientConfig: A new, immutable configuration

        Raises:
            TypeError: If an override names a field ``ClientConfig`` does not have
        """
        options = {**DEFAULTS, **self.provider.get_options(), **overrides}
        return ClientConfig(**options)
