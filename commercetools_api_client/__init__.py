"""
Python client for interacting with the commercetools HTTP API.

This package provides an asynchronous :class:`Client` that handles
OAuth2 client-credentials authentication against the commercetools
authorization server and makes authenticated requests to the
endpoints of a project.

The client keeps its access token for the lifetime announced by the
token endpoint and requests a new token when the current one expires.

Examples
--------

```python
from typing import Any

from commercetools_api_client import Client, Configuration


class Order:
    def __init__(self, data: Any) -> None:
        self.id = data["id"]
        self.version = data["version"]


configuration = Configuration(
    project_key="my-project",
    client_id="YOUR_CLIENT_ID",
    client_secret="YOUR_CLIENT_SECRET",
)

async with Client(configuration) as client:
    response = await client.get("/orders", dict, params={"limit": 20})
    order = (await client.get("/orders/123", Order)).raise_for_status()
```

Response models take the decoded JSON body as their single ``data``
constructor argument.  Other construction functions can be registered
with :meth:`ResponseModelFactory.register`.
"""

from .client import Client, is_raw_json_type
from .configuration import Configuration, ProjectScope
from .exceptions import (
    CommercetoolsAPIError,
    CommercetoolsAuthError,
    CommercetoolsError,
    ModelActivationError,
)
from .model_factory import JSONValue, ResponseModelFactory
from .response import ErrorMessage, Response
from .token import Token, is_token_valid

__all__ = [
    "Client",
    "Configuration",
    "ProjectScope",
    "Token",
    "is_token_valid",
    "Response",
    "ErrorMessage",
    "ResponseModelFactory",
    "JSONValue",
    "is_raw_json_type",
    "CommercetoolsError",
    "CommercetoolsAuthError",
    "CommercetoolsAPIError",
    "ModelActivationError",
]
