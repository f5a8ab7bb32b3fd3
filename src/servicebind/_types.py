from __future__ import annotations

import inspect
import pkgutil
import typing
from typing import Any, Protocol, cast


def type_name(cls: type) -> str:
    """Canonical service id of a class: ``module.QualName``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def locate(name: str) -> type | None:
    """Resolve a dotted path to a class, or None when it names nothing importable.

    Names without a dot cannot name a class and are never imported. Dotted names
    import their module, so a lookup may run that module's top-level code once.
    """
    if "." not in name:
        return None

    try:
        obj = pkgutil.resolve_name(name)
    except (ImportError, AttributeError, ValueError):
        return None

    return obj if inspect.isclass(obj) else None


def is_protocol(tp: Any) -> bool:
    if not inspect.isclass(tp):
        return False
    if hasattr(typing, "is_protocol"):
        # https://docs.python.org/3/library/typing.html#typing.is_protocol
        return typing.is_protocol(tp)
    return issubclass(tp, cast("type", Protocol)) and getattr(tp, "_is_protocol", False)


def is_instantiable(cls: type) -> bool:
    return inspect.isclass(cls) and not inspect.isabstract(cls) and not is_protocol(cls)


def instances_are_callable(cls: type) -> bool:
    # Looking at the MRO avoids picking up `type.__call__` from the metaclass.
    return any("__call__" in vars(base) for base in cls.__mro__ if base is not object)
