"""Value types for the OAuth domain.

These live in a separate module to avoid circular imports between
service implementations and protocol definitions.
"""

import time
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from wechat_oauth.core.exceptions import DecodeError

STANDARD_TOKEN_FIELDS = ("access_token", "token_type", "expires_in", "refresh_token", "scope")


class AccessToken(BaseModel):
    """Token returned by a successful code exchange.

    The OAuth2 standard fields are typed attributes. Anything else WeChat
    returns (``openid``, ``unionid``...) is kept in ``other_params`` and is
    also readable as an attribute, e.g. ``token.openid``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    _expires_at: Optional[int] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        if self.expires_in is not None:
            self._expires_at = int(time.time()) + self.expires_in

    @field_validator("token_type", mode="before")
    @classmethod
    def _normalize_token_type(cls, v: Any) -> Any:
        if v is None or v == "":
            return "Bearer"
        if isinstance(v, str) and v.lower() == "bearer":
            return "Bearer"
        return v

    @field_validator("expires_in", mode="before")
    @classmethod
    def _empty_expires_in(cls, v: Any) -> Any:
        return None if v == "" else v

    @property
    def expires_at(self) -> Optional[int]:
        """Unix time the token expires at, derived from ``expires_in`` when built.

        Any ``expires_at`` sent by WeChat is kept in ``other_params``.
        """
        return self._expires_at

    @property
    def other_params(self) -> Mapping[str, Any]:
        """Provider fields beyond the OAuth2 standard set."""
        return MappingProxyType(dict(self.model_extra or {}))

    def is_expired(self) -> bool:
        """Whether ``expires_at`` is in the past. Tokens without expiry never expire."""
        if self.expires_at is None:
            return False
        return self.expires_at < int(time.time())


def normalize_token_payload(payload: Mapping[str, Any]) -> AccessToken:
    """Build an ``AccessToken`` from a decoded token response.

    Raises:
        DecodeError: If ``access_token`` is missing or a standard field has the
            wrong type
    """
    try:
        return AccessToken.model_validate(dict(payload))
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        raise DecodeError(
            f"Token response has missing or invalid fields: {', '.join(fields)}"
        ) from e
