"""Fake WeChat OAuth2 service for testing."""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from wechat_oauth.core.exceptions import MissingCodeError, ProviderError
from wechat_oauth.domains.oauth.client_factory import ClientConfig, ClientFactory
from wechat_oauth.domains.oauth.fakes.config_provider import FakeClientConfigProvider
from wechat_oauth.domains.oauth.types import AccessToken


class FakeWeChatOAuth2Service:
    """In-memory fake for WeChatOAuth2ServiceProtocol.

    Seed tokens per authorization code and API responses per URL, then
    inspect recorded calls for assertions. Unknown codes fail the way WeChat
    does, with errcode 40029.
    """

    def __init__(self, **client_options: Any) -> None:
        self._factory = ClientFactory(FakeClientConfigProvider(**client_options))
        self._tokens: dict[str, AccessToken] = {}
        self._api_responses: dict[str, Dict[str, Any]] = {}
        self._calls: list[tuple[Any, ...]] = []
        self._should_raise: Optional[Exception] = None

    # -- seeding helpers --

    def seed_token(self, code: str, access_token: str, **extra: Any) -> AccessToken:
        token = AccessToken(access_token=access_token, **extra)
        self._tokens[code] = token
        return token

    def seed_api_response(self, url: str, payload: Dict[str, Any]) -> None:
        self._api_responses[url] = payload

    def set_error(self, error: Exception) -> None:
        self._should_raise = error

    def clear_error(self) -> None:
        self._should_raise = None

    @property
    def calls(self) -> list[tuple[Any, ...]]:
        return list(self._calls)

    def calls_for(self, method: str) -> list[tuple[Any, ...]]:
        return [c for c in self._calls if c[0] == method]

    # -- public methods matching WeChatOAuth2ServiceProtocol --

    def client(self, **overrides: Any) -> ClientConfig:
        self._calls.append(("client", overrides))
        return self._factory.client(**overrides)

    def authorize_url(
        self, config: ClientConfig, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        self._calls.append(("authorize_url", config, params))
        query = {
            **(params or {}),
            "response_type": "code",
            "appid": config.client_id or "",
            "redirect_uri": config.redirect_uri or "",
        }
        return f"{config.authorize_url}?{urlencode(query, doseq=True)}"

    async def get_token(
        self,
        config: ClientConfig,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AccessToken:
        self._calls.append(("get_token", config, params, headers))
        if self._should_raise:
            raise self._should_raise
        code = (params or {}).get("code") or config.params.get("code")
        if not code:
            raise MissingCodeError()
        token = self._tokens.get(code)
        if token is None:
            raise ProviderError("WeChat error 40029: invalid code", errcode=40029)
        return token

    async def get(
        self,
        config: ClientConfig,
        token: AccessToken,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        self._calls.append(("get", config, token, url, headers, params))
        if self._should_raise:
            raise self._should_raise
        payload = self._api_responses.get(url)
        if payload is None:
            raise ValueError(f"No seeded API response for {url}")
        return payload
