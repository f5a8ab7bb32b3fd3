"""Service manager with pluggable factories.

This package provides a registry that resolves string service ids to objects,
built from pre-registered instances, explicit factories, invokable classes, or
a chain of abstract factories such as constructor autowiring.

Exports:
- `ServiceManager`: The registry. Supports `get`/`create_service`/`has` and
  mapping-style access (`manager["id"]`, `"id" in manager`).
- `Factory` / `AbstractFactory`: Protocols that factories conform to.
- `InvokableFactory`: Builds a class from positional options only.
- `ReflectionFactory`: Abstract factory that autowires constructors from type hints.
- `DynamicFactory`: Abstract factory that finds `<id>Factory` classes by name.
- `type_name`: The service id under which a class is looked up.
"""

from ._container import ServiceManager
from ._errors import (
    CannotCreateError,
    ClassNotFoundError,
    ContainerError,
    DependencyNotFoundError,
    FactoryNotFoundError,
    InvalidAbstractFactoryError,
    InvalidFactoryError,
    InvalidOptionsError,
    InvalidServiceIdError,
    ParameterNotResolvableError,
    ResolutionError,
    ServiceCreationError,
)
from ._factories import AbstractFactory, DynamicFactory, Factory, InvokableFactory
from ._reflection import ReflectionFactory
from ._types import type_name


__all__ = [
    "AbstractFactory",
    "CannotCreateError",
    "ClassNotFoundError",
    "ContainerError",
    "DependencyNotFoundError",
    "DynamicFactory",
    "Factory",
    "FactoryNotFoundError",
    "InvalidAbstractFactoryError",
    "InvalidFactoryError",
    "InvalidOptionsError",
    "InvalidServiceIdError",
    "InvokableFactory",
    "ParameterNotResolvableError",
    "ReflectionFactory",
    "ResolutionError",
    "ServiceCreationError",
    "ServiceManager",
    "type_name",
]
