"""
Construction of response models from decoded JSON payloads.

Response models follow one convention: they accept the decoded JSON
body as the single positional constructor argument named ``data``.

.. code-block:: python

    class Order:
        def __init__(self, data: Any) -> None:
            self.id = data["id"]
            self.version = data["version"]

:class:`ResponseModelFactory` inspects a model type once, builds an
activator (a function taking the payload and returning a new
instance) and keeps it in its registry, so subsequent calls skip the
inspection.  Types that do not follow the convention are remembered
as unsupported and always produce ``None``.  Types with a different
construction function can be registered explicitly with
:meth:`ResponseModelFactory.register`.

The registry is owned by the factory instance, grows with the number
of distinct model types used and is never evicted.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSONValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]
Activator = Callable[[JSONValue], Any]

# Expected name of the constructor argument for response models
CONSTRUCTOR_ARGUMENT_NAME = "data"

_UNTYPED_ANNOTATIONS = (inspect.Parameter.empty, Any, object, JSONValue)
_UNTYPED_ANNOTATION_NAMES = frozenset({"Any", "object", "JSONValue"})
_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

# Negative cache marker for types without a usable constructor
_UNSUPPORTED = object()


class ResponseModelFactory:
    """Creates response model instances from untyped JSON payloads.

    Parameters
    ----------
    cache_activators : bool, optional
        Keep the activator (or the fact that there is none) for every
        inspected type.  Defaults to ``True``.  When disabled the type
        is inspected again on every call, which gives the same results
        more slowly.

    Notes
    -----
    Lookups and inserts on the registry are plain dict operations and
    safe to run from concurrent tasks.  Two tasks that look up the same
    new type at the same time may both build an activator; the result
    is the same for a given type, so whichever is stored last is used.
    """

    def __init__(self, cache_activators: bool = True) -> None:
        self.cache_activators = cache_activators
        self._registered: Dict[type, Activator] = {}
        self._activators: Dict[type, Any] = {}

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def register(self, model_type: Type[T], activator: Callable[[JSONValue], T]) -> None:
        """Use ``activator`` to build instances of ``model_type``.

        Explicit registrations take precedence over constructor
        inspection and are kept even when ``cache_activators`` is off.
        """
        if not callable(activator):
            raise TypeError("activator must be callable")
        self._registered[model_type] = activator

    def has_activator(self, model_type: type) -> bool:
        """Return ``True`` if instances of ``model_type`` can be created."""
        return self._get_activator(model_type) is not None

    def clear(self) -> None:
        """Forget every inspected type.  Explicit registrations are kept."""
        self._activators.clear()

    # ------------------------------------------------------------------
    # Object creation
    # ------------------------------------------------------------------
    def create_instance(self, model_type: Type[T], data: JSONValue) -> Optional[T]:
        """Create an instance of ``model_type`` from ``data``.

        Returns ``None`` when ``model_type`` has no constructor taking a
        single untyped ``data`` argument and no registered activator.
        Exceptions raised by the model's own constructor propagate.
        """
        activator = self._get_activator(model_type)
        if activator is None:
            return None
        return activator(data)

    def _get_activator(self, model_type: type) -> Optional[Activator]:
        registered = self._registered.get(model_type)
        if registered is not None:
            return registered

        if self.cache_activators:
            cached = self._activators.get(model_type)
            if cached is not None:
                return None if cached is _UNSUPPORTED else cached

        activator = self._create_activator(model_type)

        # Cache negative results as well: a type without a matching
        # constructor now will not have one later.
        if self.cache_activators:
            self._activators[model_type] = _UNSUPPORTED if activator is None else activator
        return activator

    def _create_activator(self, model_type: type) -> Optional[Activator]:
        if not _has_data_constructor(model_type):
            logger.debug("No '%s' constructor on %r", CONSTRUCTOR_ARGUMENT_NAME, model_type)
            return None

        def activator(data: JSONValue) -> Any:
            return model_type(data)

        activator.__qualname__ = f"activate_{getattr(model_type, '__qualname__', model_type)}"
        logger.debug("Built activator for %r", model_type)
        return activator


def _is_untyped(annotation: Any) -> bool:
    if isinstance(annotation, str):
        # Postponed annotations are matched by their last dotted name, so
        # ``t.Any`` and ``typing.Any`` are both ``Any``.
        return annotation.rsplit(".", 1)[-1] in _UNTYPED_ANNOTATION_NAMES
    return any(annotation is untyped for untyped in _UNTYPED_ANNOTATIONS)


def _has_data_constructor(model_type: Any) -> bool:
    """Return ``True`` if ``model_type(data)`` matches the model convention.

    The constructor must take exactly one positional parameter named
    ``data`` that is unannotated or annotated as an untyped JSON value.
    """
    if not inspect.isclass(model_type):
        return False
    try:
        signature = inspect.signature(model_type)
    except (TypeError, ValueError):
        return False

    parameters = list(signature.parameters.values())
    if len(parameters) != 1:
        return False
    parameter = parameters[0]
    return (
        parameter.kind in _POSITIONAL_KINDS
        and parameter.name == CONSTRUCTOR_ARGUMENT_NAME
        and _is_untyped(parameter.annotation)
    )
