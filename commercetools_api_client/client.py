"""
Client implementation for the commercetools HTTP API.

This module defines the :class:`Client` class which authenticates
against the commercetools authorization server using the OAuth2
client credentials grant and performs requests against the project
endpoints of the HTTP API.  The client keeps the access token until
the ``expires_in`` period of the token response has elapsed and then
fetches a new one.

Usage
-----

.. code-block:: python

    from commercetools_api_client import Client, Configuration

    configuration = Configuration(
        project_key="my-project",
        client_id="abc123",
        client_secret="shhsecret",
    )

    async with Client(configuration) as client:
        response = await client.get("/orders/123", Order)
        if response.success and response.result is not None:
            print(response.result.id)
        else:
            for error in response.errors:
                print(error.code, error.message)

Every call returns a :class:`~commercetools_api_client.response.Response`.
Authentication failures, error status codes and bodies that do not
fit the requested model are reported through that value.  Network
errors raised by :mod:`httpx` are not caught.
"""

from __future__ import annotations

import collections.abc
import json
import logging
import platform
import types
import typing
from importlib import metadata
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

import httpx

from .configuration import Configuration
from .model_factory import JSONValue, ResponseModelFactory
from .response import ErrorMessage, Response
from .token import Token, is_token_valid

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]

# Result types whose JSON is returned as decoded, without a model
_RAW_JSON_TYPES = (dict, list, tuple, Any, object)
_RAW_JSON_ORIGINS = (dict, list, tuple, collections.abc.Mapping, collections.abc.Sequence)

# ``X | Y`` unions (Python 3.10+)
_UnionType = getattr(types, "UnionType", None)

# Constructors raise these when a payload does not have the expected shape
_MALFORMED_PAYLOAD_ERRORS = (KeyError, TypeError, ValueError, AttributeError, IndexError)


def _user_agent() -> str:
    try:
        version = metadata.version("commercetools-api-client")
    except metadata.PackageNotFoundError:
        version = "0.0.0"
    return f"commercetools-python-sdk/{version} Python/{platform.python_version()}"


def is_raw_json_type(result_type: Any) -> bool:
    """Return ``True`` if ``result_type`` stands for undifferentiated JSON.

    Plain ``dict``/``list``/``tuple``, ``Any``, ``object`` and
    parametrized mappings or sequences (``dict[str, Any]``,
    ``list[dict]``, ``Tuple[int, ...]``...) are filled with the decoded
    body directly.  So is an optional or union of such types
    (``Optional[dict]``).  The body is not converted: a ``tuple``
    result type still receives the decoded JSON array as a ``list``.
    """
    if any(result_type is raw for raw in _RAW_JSON_TYPES):
        return True
    origin = typing.get_origin(result_type)
    if origin is Union or (_UnionType is not None and origin is _UnionType):
        members = [arg for arg in typing.get_args(result_type) if arg is not type(None)]
        return bool(members) and all(is_raw_json_type(arg) for arg in members)
    return origin in _RAW_JSON_ORIGINS


class Client:
    """An asynchronous client for the commercetools HTTP API.

    Parameters
    ----------
    configuration : Configuration
        Connection settings: URLs, project key, credentials and scope.
    http_client : httpx.AsyncClient, optional
        Transport used for every request.  Timeouts, proxies and
        connection limits are configured on this object.  When omitted
        the client creates its own and closes it in :meth:`aclose`.
    model_factory : ResponseModelFactory, optional
        Registry used to build result models.  A new factory with
        activator caching enabled is created when omitted.

    Notes
    -----
    A single client may be shared by concurrent tasks.  Tasks that
    find the token expired at the same time each fetch a new one; the
    last fetch to complete is kept.  Every fetched token is usable, so
    this only costs redundant token requests.
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        model_factory: Optional[ResponseModelFactory] = None,
    ) -> None:
        self.configuration = configuration
        self.model_factory = model_factory or ResponseModelFactory()
        self.model_factory.register(Token, Token.from_data)

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient()
        self._user_agent = _user_agent()

        self._token: Optional[Token] = None

    @property
    def token(self) -> Optional[Token]:
        """The access token currently in use, if any."""
        return self._token

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def is_token_valid(self) -> bool:
        """Return ``False`` if it is obvious the token must be renewed."""
        return is_token_valid(self._token, margin=self.configuration.token_expiry_margin)

    async def ensure_token(self) -> None:
        """Make sure the client holds a token that has not expired.

        When the current token is missing or expired it is discarded
        and a new one is requested with the client credentials grant.
        If that request fails the client is left without a token.
        """
        if self.is_token_valid():
            return

        self._token = None
        response = await self.get_token()

        if response.success and response.result is not None:
            self._token = response.result
            logger.info(
                "Retrieved %s token for project %s, expires in %ss",
                response.result.token_type,
                self.configuration.project_key,
                response.result.expires_in,
            )
        else:
            logger.warning(
                "Could not retrieve token for project %s: status %s, errors %s",
                self.configuration.project_key,
                response.status_code,
                [error.code for error in response.errors],
            )

    async def get_token(self) -> Response[Token]:
        """Request a token from the authorization server.

        Uses the client credentials grant with the configured scope.

        Returns
        -------
        Response[Token]
            The token response.  ``result`` holds the new
            :class:`~commercetools_api_client.token.Token` on success.
        """
        request = self._build_token_request(
            {
                "grant_type": "client_credentials",
                "scope": self.configuration.token_scope,
            }
        )
        return await self._send(request, Token, authorize=False, auth=self._client_auth())

    async def refresh_token(self, refresh_token: str) -> Response[Token]:
        """Exchange ``refresh_token`` for a new token.

        Refresh tokens are only issued by the password flow, which this
        client does not implement, so :meth:`ensure_token` never calls
        this method.  It is available for tokens obtained elsewhere.
        """
        if not refresh_token:
            raise ValueError("refresh_token must be provided")
        request = self._build_token_request(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            }
        )
        return await self._send(request, Token, authorize=False, auth=self._client_auth())

    def _build_token_request(self, form: Dict[str, str]) -> httpx.Request:
        """Create a form POST to the token endpoint.

        The client credentials are applied by :meth:`_client_auth` when
        the request is sent.
        """
        return self._http_client.build_request(
            "POST",
            self.configuration.oauth_url,
            data=form,
            headers={
                "Accept": "application/json",
                "User-Agent": self._user_agent,
            },
        )

    def _client_auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(
            self.configuration.client_id,
            self.configuration.client_secret.get_secret_value(),
        )

    # ------------------------------------------------------------------
    # HTTP request helpers
    # ------------------------------------------------------------------
    def build_url(self, endpoint: str) -> str:
        """Return the project URL for ``endpoint``.

        The endpoint excludes the project key; a leading slash is added
        when missing::

            <api_url>/<project_key>/<endpoint>
        """
        if endpoint and endpoint.strip() and not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        return f"{self.configuration.api_url}/{self.configuration.project_key}{endpoint}"

    def _build_request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[QueryParams] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Request:
        """Create an API request.  The Authorization header is added by :meth:`_send`."""
        headers = {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }
        if content is not None:
            headers["Content-Type"] = "application/json; charset=utf-8"
        return self._http_client.build_request(
            method,
            self.build_url(endpoint),
            params=params,
            content=content,
            headers=headers,
        )

    async def _send(
        self,
        request: httpx.Request,
        result_type: Type[T],
        *,
        authorize: bool = True,
        auth: Optional[httpx.Auth] = None,
    ) -> Response[T]:
        """Send ``request`` and decode the response into ``result_type``.

        When ``authorize`` is true a valid token is ensured first and
        sent as a Bearer token.  If none can be obtained the request is
        not sent and a ``no_token`` error response is returned.  ``auth``
        is handed to the transport as is; the token requests use it for
        the client credentials.

        Raises
        ------
        httpx.RequestError
            On network failures.  These are not converted into
            responses.
        """
        if authorize:
            if not self.is_token_valid():
                await self.ensure_token()

            token = self._token
            if token is None:
                return Response.no_token()
            request.headers["Authorization"] = f"Bearer {token.access_token}"

        logger.debug("%s %s", request.method, request.url)
        http_response = await self._http_client.send(request, auth=auth)
        logger.debug("%s %s -> %s", request.method, request.url, http_response.status_code)
        return self._decode(http_response, result_type)

    def _decode(self, http_response: httpx.Response, result_type: Type[T]) -> Response[T]:
        response: Response[T] = Response(
            status_code=http_response.status_code,
            reason_phrase=http_response.reason_phrase,
        )

        if not 200 <= http_response.status_code < 300:
            response.success = False
            response.errors = _parse_errors(http_response)
            return response

        response.success = True
        try:
            data = _decode_json(http_response)
        except ValueError:
            logger.warning(
                "Response body from %s is not valid JSON", http_response.request.url
            )
            return response

        if is_raw_json_type(result_type):
            response.result = data
            return response

        try:
            response.result = self.model_factory.create_instance(result_type, data)
        except _MALFORMED_PAYLOAD_ERRORS as exc:
            logger.warning(
                "Could not build %s from response of %s: %r",
                getattr(result_type, "__name__", result_type),
                http_response.request.url,
                exc,
            )
        return response

    # ------------------------------------------------------------------
    # Public request methods
    # ------------------------------------------------------------------
    async def get(
        self,
        endpoint: str,
        result_type: Type[T],
        *,
        params: Optional[QueryParams] = None,
    ) -> Response[T]:
        """Execute a GET request.

        Parameters
        ----------
        endpoint : str
            API endpoint, excluding the project key (e.g. ``"/orders"``).
        result_type : type
            Type the response body is decoded into: a raw JSON type such
            as ``dict`` or a model taking a single ``data`` argument.
        params : mapping or sequence of pairs, optional
            Query string values.  Pass a sequence of pairs (or lists as
            mapping values) to repeat a key.
        """
        request = self._build_request("GET", endpoint, params=params)
        return await self._send(request, result_type)

    async def post(
        self,
        endpoint: str,
        result_type: Type[T],
        payload: Any,
    ) -> Response[T]:
        """Execute a POST request with a JSON body.

        ``payload`` is either an already serialized JSON string or an
        object that :func:`json.dumps` can serialize.  It is sent UTF-8
        encoded.  See :meth:`get` for the other parameters.
        """
        request = self._build_request("POST", endpoint, content=_encode_payload(payload))
        return await self._send(request, result_type)

    async def delete(
        self,
        endpoint: str,
        result_type: Type[T],
        *,
        params: Optional[QueryParams] = None,
    ) -> Response[T]:
        """Execute a DELETE request.

        See :meth:`get` for full parameter documentation.
        """
        request = self._build_request("DELETE", endpoint, params=params)
        return await self._send(request, result_type)


def _encode_payload(payload: Any) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _decode_json(http_response: httpx.Response) -> JSONValue:
    """Decode the response body.  An empty body decodes to ``None``."""
    if not http_response.content.strip():
        return None
    return http_response.json()


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_errors(http_response: httpx.Response) -> List[ErrorMessage]:
    """Read the ``errors`` array of an error envelope.

    Bodies that are not JSON objects or lack an ``errors`` array
    produce an empty list.
    """
    try:
        data = _decode_json(http_response)
    except ValueError:
        return []
    if not isinstance(data, dict):
        return []

    errors = data.get("errors")
    if not isinstance(errors, list):
        return []

    return [
        ErrorMessage(_as_str(error.get("code")), _as_str(error.get("message")))
        for error in errors
        if isinstance(error, dict) and error
    ]
