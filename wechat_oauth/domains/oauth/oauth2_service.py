"""OAuth2 service for WeChat authorization and token exchange.

WeChat departs from RFC 6749 in three ways handled here:

- credentials are sent as ``appid`` / ``secret`` instead of
  ``client_id`` / ``client_secret``;
- the token endpoint is called with GET, parameters in the query string;
- the token response body is a JSON document that may itself arrive as a
  JSON-encoded string, so it is decoded explicitly.
"""

import json
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import httpx

from wechat_oauth.core.config import TokenMethod
from wechat_oauth.core.exceptions import (
    ConfigurationError,
    DecodeError,
    MissingCodeError,
    ProviderError,
    TransportError,
)
from wechat_oauth.core.logging import ContextualLogger
from wechat_oauth.core.logging import logger as default_logger
from wechat_oauth.domains.oauth.client_factory import ClientConfig, ClientFactory
from wechat_oauth.domains.oauth.protocols import WeChatOAuth2ServiceProtocol
from wechat_oauth.domains.oauth.types import AccessToken, normalize_token_payload


class WeChatOAuth2Service(WeChatOAuth2ServiceProtocol):
    """Service for the WeChat OAuth2 authorization code flow.

    Holds no per-flow state: every method takes the ``ClientConfig`` it works
    with, so one instance can serve any number of concurrent logins.
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize with injected dependencies."""
        self.client_factory = client_factory or ClientFactory()
        self.logger = logger or default_logger.with_context(component="wechat_oauth2")

    def client(self, **overrides: Any) -> ClientConfig:
        """Construct a client configuration for one flow.

        See ``ClientFactory.client``.
        """
        return self.client_factory.client(**overrides)

    def authorize_url(
        self, config: ClientConfig, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        """Build the URL the user is redirected to for authorization.

        ``response_type``, ``appid`` and ``redirect_uri`` always come from
        ``config``; same-named entries in ``params`` are ignored.

        Args:
            config: The client configuration
            params: Extra query parameters such as ``scope`` or ``state``

        Returns:
            The authorization URL with an encoded query string
        """
        forced = {
            "response_type": "code",
            "appid": config.client_id or "",
            "redirect_uri": config.redirect_uri or "",
        }
        # A code attached for the token exchange stays out of the redirect
        attached = {key: value for key, value in config.params.items() if key != "code"}
        extras = {**attached, **(params or {})}
        query = dict(forced)
        for key, value in extras.items():
            if key in forced or value is None:
                continue
            query[key] = value

        base_url = config.resolve_url(config.authorize_url)
        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}{urlencode(query, doseq=True)}"

    def authorize_url_for(
        self, params: Optional[Mapping[str, Any]] = None, **overrides: Any
    ) -> str:
        """Build a client from ``overrides`` and return its authorization URL."""
        return self.authorize_url(self.client(**overrides), params)

    async def get_token(
        self,
        config: ClientConfig,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AccessToken:
        """Exchange an authorization code for an access token.

        The code is taken from ``params["code"]``, or else from a code
        previously attached with ``ClientConfig.with_params``.

        Args:
            config: The client configuration
            params: Extra query parameters; may carry ``code``
            headers: Extra request headers

        Returns:
            AccessToken: The normalized token

        Raises:
            MissingCodeError: If no code is available; nothing is sent
            ConfigurationError: If the client id or secret is missing; nothing is sent
            TransportError: If the request fails or times out
            ProviderError: If WeChat answers with an error status or errcode
            DecodeError: If the response is not a usable token payload
        """
        extra_params = dict(params or {})
        code = extra_params.pop("code", None) or config.params.get("code")
        if not code:
            self.logger.warning("Token exchange attempted without an authorization code")
            raise MissingCodeError(f"Missing required key `code` for {type(self).__name__}")

        self._ensure_credentials(config)

        if str(config.token_method).lower() != TokenMethod.GET.value:
            self.logger.warning(
                f"Ignoring configured token method {config.token_method!r}; "
                f"WeChat token requests are always sent with GET"
            )

        request_params = {
            **{key: value for key, value in config.params.items() if key != "code"},
            **extra_params,
            "code": code,
            "grant_type": "authorization_code",
            "appid": config.client_id,
            "secret": config.client_secret,
            "redirect_uri": config.redirect_uri,
        }
        request_params = {key: value for key, value in request_params.items() if value is not None}

        request_headers = self._build_headers(
            config.headers, headers, {"Accept": "application/json"}
        )

        url = config.resolve_url(config.token_url)
        self.logger.info(
            f"WeChat code exchange request - "
            f"URL: {url}, "
            f"Redirect URI: {config.redirect_uri}, "
            f"App ID: {config.client_id}, "
            f"Code length: {len(str(code))}"
        )

        response = await self._send(config, url, request_params, request_headers)
        payload = self._decode_payload(response)
        self._raise_for_errcode(payload)

        try:
            token = normalize_token_payload(payload)
        except DecodeError as e:
            self.logger.error(f"WeChat token payload rejected: {e.message}")
            raise

        self.logger.info(
            f"WeChat code exchange succeeded - "
            f"expires_in: {token.expires_in}, "
            f"extra fields: {sorted(token.other_params)}"
        )
        return token

    async def exchange_code(
        self,
        code: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> AccessToken:
        """Build a client from ``overrides`` and exchange ``code`` with it."""
        config = self.client(**overrides)
        return await self.get_token(config, {**(params or {}), "code": code}, headers)

    async def get(
        self,
        config: ClientConfig,
        token: AccessToken,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Call a WeChat API endpoint with ``token``.

        WeChat expects ``access_token`` (and usually ``openid``) as query
        parameters; the token is also sent as an ``Authorization`` header.

        Args:
            config: The client configuration; relative URLs resolve against its site
            token: Token from a previous exchange
            url: Endpoint such as ``/userinfo``
            headers: Extra request headers
            params: Extra query parameters

        Returns:
            The decoded JSON response

        Raises:
            TransportError: If the request fails or times out
            ProviderError: If WeChat answers with an error status or errcode
            DecodeError: If the response is not a JSON object
        """
        request_params = {**(params or {}), "access_token": token.access_token}
        openid = token.other_params.get("openid")
        if openid is not None:
            request_params.setdefault("openid", openid)

        request_headers = self._build_headers(
            config.headers,
            headers,
            {"Authorization": f"{token.token_type} {token.access_token}"},
        )

        full_url = config.resolve_url(url)
        self.logger.debug(f"WeChat API request to {full_url}")

        response = await self._send(config, full_url, request_params, request_headers)
        payload = self._decode_payload(response)
        self._raise_for_errcode(payload)
        return payload

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_credentials(self, config: ClientConfig) -> None:
        """Raise ConfigurationError unless both client id and secret are set."""
        credentials = {"client_id": config.client_id, "client_secret": config.client_secret}
        missing = [name for name, value in credentials.items() if not value]
        if missing:
            error_message = f"WeChat client is missing {', '.join(missing)}"
            self.logger.error(error_message)
            raise ConfigurationError(error_message)

    def _build_headers(
        self,
        base: Mapping[str, str],
        extra: Optional[Mapping[str, str]],
        forced: Mapping[str, str],
    ) -> Dict[str, str]:
        """Merge header mappings; later names replace earlier ones case-insensitively."""
        merged: Dict[str, str] = {}
        for source in (base, extra or {}, forced):
            for name, value in source.items():
                for existing in [key for key in merged if key.lower() == name.lower()]:
                    del merged[existing]
                merged[name] = value
        return merged

    async def _send(
        self,
        config: ClientConfig,
        url: str,
        params: Mapping[str, Any],
        headers: Mapping[str, str],
    ) -> httpx.Response:
        """Issue a single GET request. Failures are not retried."""
        try:
            async with httpx.AsyncClient(timeout=config.timeout) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            self.logger.error(f"Request to {url} timed out after {config.timeout}s")
            raise TransportError(url, "Request to WeChat timed out") from e
        except httpx.HTTPError as e:
            self.logger.error(f"Request to {url} failed: {str(e)}")
            raise TransportError(url) from e

        self.logger.debug(f"Received response: Status {response.status_code}")

        if response.is_error:
            self.logger.error(
                f"WeChat request failed - Status: {response.status_code}, "
                f"Response text: {response.text}"
            )
            raise ProviderError(
                f"WeChat responded with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def _decode_payload(self, response: httpx.Response) -> Dict[str, Any]:
        """Decode the response body into a string-keyed payload.

        WeChat may deliver the JSON document as a JSON string value; in that
        case the string is decoded a second time.
        """
        body = response.text
        try:
            payload = json.loads(body)
            if isinstance(payload, str):
                payload = json.loads(payload)
        except ValueError as e:
            self.logger.error(f"WeChat response is not valid JSON: {body[:200]!r}")
            raise DecodeError("WeChat response is not valid JSON", body=body) from e

        if not isinstance(payload, dict):
            self.logger.error(f"WeChat response is not a JSON object: {type(payload).__name__}")
            raise DecodeError("WeChat response is not a JSON object", body=body)
        return payload

    def _raise_for_errcode(self, payload: Mapping[str, Any]) -> None:
        """Raise ProviderError for WeChat's ``{"errcode": n, "errmsg": ...}`` envelope."""
        errcode = payload.get("errcode")
        if errcode in (None, 0, "0"):
            return
        errmsg = payload.get("errmsg")
        self.logger.error(f"WeChat returned errcode {errcode}: {errmsg}")
        raise ProviderError(f"WeChat error {errcode}: {errmsg}", errcode=errcode, errmsg=errmsg)
