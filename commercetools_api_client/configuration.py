"""
Connection settings for the commercetools API client.

A :class:`Configuration` holds everything a :class:`~commercetools_api_client.Client`
needs to authenticate and address a project: the API and OAuth URLs,
the project key, the client credentials and the scope requested with
every token.  Values can be passed programmatically or read from
``CTP_*`` environment variables:

.. code-block:: python

    from commercetools_api_client import Configuration, ProjectScope

    configuration = Configuration(
        project_key="my-project",
        client_id="abc123",
        client_secret="shhsecret",
        scope=ProjectScope.VIEW_PRODUCTS,
    )

Instances are frozen.  Assigning to a field after construction raises
:class:`pydantic.ValidationError`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProjectScope(str, Enum):
    """Scopes that can be requested for a project token."""

    MANAGE_PROJECT = "manage_project"
    MANAGE_PRODUCTS = "manage_products"
    VIEW_PRODUCTS = "view_products"
    MANAGE_ORDERS = "manage_orders"
    VIEW_ORDERS = "view_orders"
    MANAGE_CUSTOMERS = "manage_customers"
    VIEW_CUSTOMERS = "view_customers"
    MANAGE_PAYMENTS = "manage_payments"
    VIEW_PAYMENTS = "view_payments"
    MANAGE_TYPES = "manage_types"
    VIEW_TYPES = "view_types"
    MANAGE_SHIPPING_METHODS = "manage_shipping_methods"
    VIEW_SHIPPING_METHODS = "view_shipping_methods"
    MANAGE_DISCOUNT_CODES = "manage_discount_codes"
    VIEW_DISCOUNT_CODES = "view_discount_codes"
    MANAGE_CART_DISCOUNTS = "manage_cart_discounts"
    VIEW_CART_DISCOUNTS = "view_cart_discounts"
    MANAGE_PRODUCT_TYPES = "manage_product_types"
    VIEW_PRODUCT_TYPES = "view_product_types"


class Configuration(BaseSettings):
    """Immutable connection settings for one commercetools project.

    Parameters
    ----------
    api_url : str, optional
        Base URL of the HTTP API, without the project key.
    oauth_url : str, optional
        Full URL of the OAuth token endpoint.
    project_key : str
        Key of the project every request is addressed to.
    client_id : str
        OAuth client identifier.
    client_secret : str
        OAuth client secret.  Stored as a :class:`~pydantic.SecretStr`
        so it is masked in ``repr`` output and logs.
    scope : ProjectScope, optional
        Scope requested for access tokens.  Defaults to
        ``manage_project``.
    token_expiry_margin : float, optional
        Seconds subtracted from a token's lifetime when deciding whether
        it has expired.  The default of ``0`` treats a token as valid
        until the exact moment it expires, so a request issued just
        before expiry may still be rejected by the server.
    """

    model_config = SettingsConfigDict(env_prefix="CTP_", frozen=True)

    api_url: str = "https://api.sphere.io"
    oauth_url: str = "https://auth.sphere.io/oauth/token"
    project_key: str
    client_id: str
    client_secret: SecretStr
    scope: ProjectScope = ProjectScope.MANAGE_PROJECT
    token_expiry_margin: float = 0.0

    @field_validator("project_key", "client_id")
    @classmethod
    def _require_value(cls, value: str, info) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} must be provided")
        return value

    @field_validator("api_url", "oauth_url")
    @classmethod
    def _require_url(cls, value: str, info) -> str:
        # A URL made of slashes only is as empty as a blank one
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError(f"{info.field_name} must be provided")
        return value

    @field_validator("client_secret")
    @classmethod
    def _require_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("client_secret must be provided")
        return value

    @field_validator("token_expiry_margin")
    @classmethod
    def _non_negative_margin(cls, value: float) -> float:
        if value < 0:
            raise ValueError("token_expiry_margin must not be negative")
        return value

    @property
    def token_scope(self) -> str:
        """The ``scope`` form value sent to the token endpoint."""
        return f"{self.scope.value}:{self.project_key}"
