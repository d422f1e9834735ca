"""Unit tests for ClientConfig and ClientFactory.

Covers:
- built-in defaults
- layering: defaults < process options < overrides
- SettingsConfigProvider (snapshot at creation, unset values skipped)
- ClientConfig immutability, with_params, resolve_url
"""

import dataclasses
from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest

from wechat_oauth.core.config import Settings
from wechat_oauth.domains.oauth.client_factory import (
    DEFAULTS,
    ClientConfig,
    ClientFactory,
    SettingsConfigProvider,
)
from wechat_oauth.domains.oauth.fakes.config_provider import FakeClientConfigProvider


def _settings(**values: Any) -> Settings:
    return Settings(_env_file=None, **values)


# ===========================================================================
# Defaults
# ===========================================================================


def test_defaults_point_at_wechat():
    config = ClientFactory(FakeClientConfigProvider()).client()

    assert config.site == "https://api.weixin.qq.com/sns"
    assert config.authorize_url == "https://open.weixin.qq.com/connect/oauth2/authorize"
    assert config.token_url == "/oauth2/access_token"
    assert config.token_method == "get"
    assert config.client_id is None
    assert config.client_secret is None
    assert dict(config.params) == {}
    assert dict(config.headers) == {}


def test_defaults_are_read_only():
    with pytest.raises(TypeError):
        DEFAULTS["site"] = "https://elsewhere.example.com"  # type: ignore[index]


# ===========================================================================
# Layering (table-driven)
# ===========================================================================


@dataclass
class LayerCase:
    desc: str
    process: dict
    overrides: dict
    field_name: str
    expected: Any


LAYER_CASES = [
    LayerCase("override beats process config", {"redirect_uri": "Y"}, {"redirect_uri": "X"},
              "redirect_uri", "X"),
    LayerCase("process config beats defaults", {"site": "https://proxy.example.com"}, {},
              "site", "https://proxy.example.com"),
    LayerCase("override beats defaults", {}, {"token_url": "/token"}, "token_url", "/token"),
    LayerCase("process config used when no override", {"client_id": "wx1"}, {},
              "client_id", "wx1"),
    LayerCase("override can clear a process value", {"client_secret": "s"},
              {"client_secret": None}, "client_secret", None),
]


@pytest.mark.parametrize("case", LAYER_CASES, ids=lambda c: c.desc)
def test_layering(case: LayerCase):
    factory = ClientFactory(FakeClientConfigProvider(**case.process))
    config = factory.client(**case.overrides)
    assert getattr(config, case.field_name) == case.expected


def test_unknown_override_raises_type_error():
    with pytest.raises(TypeError):
        ClientFactory(FakeClientConfigProvider()).client(client_identifier="wx1")


def test_each_call_builds_a_fresh_config():
    provider = FakeClientConfigProvider(client_id="wx1")
    factory = ClientFactory(provider)

    first = factory.client(redirect_uri="https://a.example.com")
    second = factory.client()

    assert first is not second
    assert second.redirect_uri is None
    assert provider.lookups == 2


def test_default_provider_reads_process_settings():
    with patch(
        "wechat_oauth.domains.oauth.client_factory.settings",
        _settings(WECHAT_CLIENT_ID="wx-env", WECHAT_REDIRECT_URI="https://env.example.com/cb"),
    ):
        factory = ClientFactory()

    config = factory.client()
    assert config.client_id == "wx-env"
    assert config.redirect_uri == "https://env.example.com/cb"
    assert config.site == DEFAULTS["site"]


# ===========================================================================
# SettingsConfigProvider
# ===========================================================================


def test_settings_provider_skips_unset_values():
    provider = SettingsConfigProvider(_settings(WECHAT_CLIENT_ID="wx1"))
    options = provider.get_options()

    assert options["client_id"] == "wx1"
    assert "client_secret" not in options
    assert "site" not in options
    assert options["timeout"] == 10.0


def test_settings_provider_snapshots_at_creation():
    app_settings = _settings(WECHAT_CLIENT_ID="wx1")
    provider = SettingsConfigProvider(app_settings)

    app_settings.WECHAT_CLIENT_ID = "wx2"

    assert provider.get_options()["client_id"] == "wx1"


def test_settings_provider_endpoint_overrides():
    provider = SettingsConfigProvider(
        _settings(
            WECHAT_SITE="https://sandbox.example.com/sns",
            WECHAT_TOKEN_URL="/token",
            WECHAT_TOKEN_METHOD="get",
            WECHAT_HTTP_TIMEOUT=3,
        )
    )
    config = ClientFactory(provider).client()

    assert config.site == "https://sandbox.example.com/sns"
    assert config.token_url == "/token"
    assert config.authorize_url == DEFAULTS["authorize_url"]
    assert config.timeout == 3.0


# ===========================================================================
# ClientConfig
# ===========================================================================


def _config(**overrides: Any) -> ClientConfig:
    return ClientFactory(FakeClientConfigProvider(client_id="wx1")).client(**overrides)


def test_config_is_frozen():
    config = _config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.client_id = "other"  # type: ignore[misc]


def test_config_params_and_headers_are_read_only():
    config = _config(params={"lang": "zh_CN"}, headers={"X-Tenant": "t1"})
    with pytest.raises(TypeError):
        config.params["lang"] = "en"  # type: ignore[index]
    with pytest.raises(TypeError):
        config.headers["X-Tenant"] = "t2"  # type: ignore[index]


def test_config_does_not_alias_caller_dicts():
    params = {"lang": "zh_CN"}
    config = _config(params=params)
    params["lang"] = "en"
    assert config.params["lang"] == "zh_CN"


def test_with_params_returns_new_config():
    config = _config(params={"lang": "zh_CN"})
    attached = config.with_params(code="auth-code")

    assert attached is not config
    assert dict(attached.params) == {"lang": "zh_CN", "code": "auth-code"}
    assert dict(config.params) == {"lang": "zh_CN"}
    assert attached.client_id == config.client_id


@dataclass
class ResolveCase:
    desc: str
    site: str
    url: str
    expected: str


RESOLVE_CASES = [
    ResolveCase("relative path", "https://api.weixin.qq.com/sns", "/oauth2/access_token",
                "https://api.weixin.qq.com/sns/oauth2/access_token"),
    ResolveCase("site with trailing slash", "https://api.weixin.qq.com/sns/", "/userinfo",
                "https://api.weixin.qq.com/sns/userinfo"),
    ResolveCase("path without leading slash", "https://api.weixin.qq.com/sns", "auth",
                "https://api.weixin.qq.com/sns/auth"),
    ResolveCase("relative path with a URL in its query", "https://api.weixin.qq.com/sns",
                "/userinfo?next=https://app.example.com/x",
                "https://api.weixin.qq.com/sns/userinfo?next=https://app.example.com/x"),
    ResolveCase("absolute URL unchanged", "https://api.weixin.qq.com/sns",
                "https://open.weixin.qq.com/connect/qrconnect",
                "https://open.weixin.qq.com/connect/qrconnect"),
]


@pytest.mark.parametrize("case", RESOLVE_CASES, ids=lambda c: c.desc)
def test_resolve_url(case: ResolveCase):
    assert _config(site=case.site).resolve_url(case.url) == case.expected
