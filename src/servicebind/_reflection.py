from __future__ import annotations

import collections.abc
import inspect
import logging
import types
import typing
from typing import TYPE_CHECKING, Any, Union, get_type_hints

from ._errors import (
    CannotCreateError,
    DependencyNotFoundError,
    InvalidOptionsError,
    ParameterNotResolvableError,
)
from ._types import is_instantiable, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._container import ServiceManager
    from ._factories import Options


_MAPPING_TYPES = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_COLLECTION_TYPES = (
    list,
    tuple,
    set,
    frozenset,
    *_MAPPING_TYPES,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)


class ReflectionFactory:
    """Abstract factory that autowires a class from its ``__init__`` annotations.

    The service id must be the dotted name of the class. Every class-typed
    constructor parameter is fetched from the container under that class's
    dotted name; see `ParameterResolver` for the remaining rules.
    A mapping passed as options supplies arguments by parameter name.
    """

    def __call__(self, container: ServiceManager, service: str, options: Options = None) -> Any:
        if not self.can_create(container, service):
            msg = f'Cannot create service "{service}".'
            raise CannotCreateError(msg)

        if options is not None and not isinstance(options, collections.abc.Mapping):
            msg = f'Cannot create service "{service}": Invalid options given.'
            raise InvalidOptionsError(msg)

        cls = typing.cast("type", container.locate(service))
        if cls.__init__ is object.__init__:
            return cls()

        sig = inspect.signature(cls)
        if not sig.parameters:
            return cls()

        args, kwargs = ParameterResolver(container, service).resolve_all(cls, sig, options or {})
        return cls(*args, **kwargs)

    def can_create(self, container: ServiceManager, service: str) -> bool:
        cls = container.locate(service)
        return cls is not None and is_instantiable(cls)


class ParameterResolver:
    """Supplies constructor arguments for one service from the container.

    Per parameter, in order:
    1. explicit override by name
    2. collection annotation -> empty collection
    3. no class annotation -> default, else `ParameterNotResolvableError`
    4. class registered in the container -> container value
    5. default, else `DependencyNotFoundError`.
    """

    def __init__(self, container: ServiceManager, service: str) -> None:
        self._container = container
        self._service = service

    def resolve_all(
        self, cls: type, sig: inspect.Signature, overrides: Mapping[str, Any]
    ) -> tuple[list[Any], dict[str, Any]]:
        hints = _get_init_type_hints(cls)
        args, kwargs = [], {}

        for name, p in sig.parameters.items():
            # Variadics are never injected
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            value = overrides[name] if name in overrides else self.resolve(p, hints.get(name, p.empty))

            if p.kind is p.KEYWORD_ONLY:
                kwargs[name] = value
            else:
                args.append(value)

        return args, kwargs

    def resolve(self, p: inspect.Parameter, ann: Any) -> Any:
        if _is_collection(ann):
            return _empty_collection(ann)

        dependency = _dependency_class(ann)
        if dependency is None:
            if p.default is p.empty:
                msg = (
                    f'Unable to create service "{self._service}": '
                    f'Cannot resolve parameter "{p.name}" to a class or interface.'
                )
                raise ParameterNotResolvableError(msg)
            return p.default

        dependency_id = type_name(dependency)
        if self._container.has(dependency_id):
            return self._container.get(dependency_id)

        if p.default is not p.empty:
            return p.default

        msg = (
            f'Unable to create service "{self._service}": '
            f'Cannot resolve parameter "{p.name}" using type hint "{dependency_id}".'
        )
        raise DependencyNotFoundError(msg)


def _unwrap_optional(ann: Any) -> Any:
    if typing.get_origin(ann) in (Union, types.UnionType):
        members = [arg for arg in typing.get_args(ann) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return ann


def _is_collection(ann: Any) -> bool:
    ann = _unwrap_optional(ann)
    origin = typing.get_origin(ann) or ann
    return origin in _COLLECTION_TYPES


def _empty_collection(ann: Any) -> Any:
    ann = _unwrap_optional(ann)
    origin = typing.get_origin(ann) or ann
    if origin in _MAPPING_TYPES:
        return {}
    if inspect.isabstract(origin):
        return []
    return origin()


def _dependency_class(ann: Any) -> type | None:
    """Class the container should be asked for, or None for scalars and missing hints."""
    ann = _unwrap_optional(ann)
    if ann is inspect.Parameter.empty or ann is Any or not inspect.isclass(ann):
        return None
    if getattr(ann, "__module__", "") == "builtins":
        return None
    return ann


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    init = inspect.getattr_static(cls, "__init__", None)
    try:
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = _get_type_hints_one_by_one(init)

    return hints


def _get_type_hints_one_by_one(func: Any) -> dict[str, Any]:
    """Evaluate each annotation separately; those that fail are left out."""
    hints = {}
    namespace = getattr(func, "__globals__", {})
    for name, ann in getattr(func, "__annotations__", {}).items():
        if not isinstance(ann, str):
            hints[name] = ann
            continue
        try:
            hints[name] = eval(ann, namespace)  # noqa: S307
        except (NameError, AttributeError, SyntaxError, TypeError):
            logger.debug("Ignoring unresolvable annotation %r on %s", ann, func.__qualname__)

    return hints
