"""Tests for Configuration loading and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from commercetools_api_client import Configuration, ProjectScope


def test_defaults() -> None:
    configuration = Configuration(project_key="shop", client_id="id", client_secret="secret")

    assert configuration.api_url == "https://api.sphere.io"
    assert configuration.oauth_url == "https://auth.sphere.io/oauth/token"
    assert configuration.scope is ProjectScope.MANAGE_PROJECT
    assert configuration.token_expiry_margin == 0.0
    assert configuration.token_scope == "manage_project:shop"


def test_scope_value_is_used_in_token_scope() -> None:
    configuration = Configuration(
        project_key="shop",
        client_id="id",
        client_secret="secret",
        scope=ProjectScope.VIEW_PRODUCTS,
    )

    assert configuration.token_scope == "view_products:shop"


def test_scope_accepts_wire_value() -> None:
    configuration = Configuration(
        project_key="shop", client_id="id", client_secret="secret", scope="view_orders"
    )

    assert configuration.scope is ProjectScope.VIEW_ORDERS


def test_trailing_slashes_are_removed() -> None:
    configuration = Configuration(
        api_url="https://api.example.test/",
        oauth_url="https://auth.example.test/oauth/token/",
        project_key="shop",
        client_id="id",
        client_secret="secret",
    )

    assert configuration.api_url == "https://api.example.test"
    assert configuration.oauth_url == "https://auth.example.test/oauth/token"


def test_url_whitespace_is_stripped_before_slashes() -> None:
    configuration = Configuration(
        api_url=" https://api.example.test// ",
        project_key="shop",
        client_id="id",
        client_secret="secret",
    )

    assert configuration.api_url == "https://api.example.test"


@pytest.mark.parametrize(
    "overrides",
    [
        {"project_key": ""},
        {"client_id": "  "},
        {"client_secret": ""},
        {"api_url": ""},
        {"api_url": "/"},
        {"oauth_url": " /// "},
        {"token_expiry_margin": -1},
        {"scope": "manage_everything"},
    ],
)
def test_invalid_values_are_rejected(overrides: dict) -> None:
    values = {"project_key": "shop", "client_id": "id", "client_secret": "secret"}
    values.update(overrides)

    with pytest.raises(ValidationError):
        Configuration(**values)


def test_configuration_is_immutable() -> None:
    configuration = Configuration(project_key="shop", client_id="id", client_secret="secret")

    with pytest.raises(ValidationError):
        configuration.project_key = "other"


def test_secret_is_masked() -> None:
    configuration = Configuration(project_key="shop", client_id="id", client_secret="secret")

    assert "'secret'" not in repr(configuration)
    assert configuration.client_secret.get_secret_value() == "secret"


def test_reads_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CTP_PROJECT_KEY", "env-shop")
    monkeypatch.setenv("CTP_CLIENT_ID", "env-id")
    monkeypatch.setenv("CTP_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("CTP_SCOPE", "manage_orders")
    monkeypatch.setenv("CTP_TOKEN_EXPIRY_MARGIN", "30")

    configuration = Configuration()

    assert configuration.project_key == "env-shop"
    assert configuration.client_id == "env-id"
    assert configuration.client_secret.get_secret_value() == "env-secret"
    assert configuration.scope is ProjectScope.MANAGE_ORDERS
    assert configuration.token_expiry_margin == 30.0
