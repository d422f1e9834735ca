"""Process-wide settings loaded once from the environment."""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wechat_oauth.core.config.enums import Environment


class Settings(BaseSettings):
    """WeChat OAuth settings.

    Values come from environment variables (or a local ``.env`` file). Only the
    client credentials are normally set; the endpoint fields exist to point the
    client at a sandbox or a proxy.

    Attributes:
        ENVIRONMENT: Deployment environment
        LOG_LEVEL: Root log level name
        LOG_JSON: Emit JSON log lines; defaults to on outside local development

        WECHAT_CLIENT_ID: The ``appid`` issued by WeChat
        WECHAT_CLIENT_SECRET: The ``secret`` issued by WeChat
        WECHAT_REDIRECT_URI: Default callback URL registered with WeChat

        WECHAT_SITE: Base URL for API and token requests
        WECHAT_AUTHORIZE_URL: User-facing authorization endpoint
        WECHAT_TOKEN_URL: Token endpoint, relative to WECHAT_SITE or absolute
        WECHAT_TOKEN_METHOD: HTTP method configured for the token endpoint

        WECHAT_HTTP_TIMEOUT: Timeout in seconds for outbound requests
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: Environment = Environment.LOCAL
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None

    WECHAT_CLIENT_ID: Optional[str] = None
    WECHAT_CLIENT_SECRET: Optional[str] = None
    WECHAT_REDIRECT_URI: Optional[str] = None

    WECHAT_SITE: Optional[str] = None
    WECHAT_AUTHORIZE_URL: Optional[str] = None
    WECHAT_TOKEN_URL: Optional[str] = None
    WECHAT_TOKEN_METHOD: Optional[str] = None

    WECHAT_HTTP_TIMEOUT: float = Field(10.0, gt=0, description="Request timeout in seconds")

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def log_json(self) -> bool:
        """Whether log lines should be rendered as JSON."""
        if self.LOG_JSON is not None:
            return self.LOG_JSON
        return self.ENVIRONMENT != Environment.LOCAL

    def oauth_client_options(self) -> Dict[str, Any]:
        """Return the client options this process has configured.

        Unset values are left out so they never shadow the built-in defaults.
        """
        options = {
            "client_id": self.WECHAT_CLIENT_ID,
            "client_secret": self.WECHAT_CLIENT_SECRET,
            "redirect_uri": self.WECHAT_REDIRECT_URI,
            "site": self.WECHAT_SITE,
            "authorize_url": self.WECHAT_AUTHORIZE_URL,
            "token_url": self.WECHAT_TOKEN_URL,
            "token_method": self.WECHAT_TOKEN_METHOD,
            "timeout": self.WECHAT_HTTP_TIMEOUT,
        }
        return {key: value for key, value in options.items() if value is not None}
