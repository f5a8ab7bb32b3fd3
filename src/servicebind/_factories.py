from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ._errors import CannotCreateError, InvalidOptionsError
from ._types import instances_are_callable, is_instantiable, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._container import ServiceManager

    Options = Sequence[Any] | Mapping[str, Any] | None


@runtime_checkable
class Factory(Protocol):
    """Anything called as ``factory(container, service, options)`` to build a service."""

    def __call__(self, container: ServiceManager, service: str, options: Options = None) -> Any: ...


@runtime_checkable
class AbstractFactory(Protocol):
    """A fallback factory that is asked `can_create` before it is called."""

    def __call__(self, container: ServiceManager, service: str, options: Options = None) -> Any: ...

    def can_create(self, container: ServiceManager, service: str) -> bool: ...


def is_positional(options: object) -> bool:
    return isinstance(options, (list, tuple))


class InvokableFactory:
    """Builds the class named by the service id without asking the container for anything.

    With no options the class is constructed without arguments; a list or tuple of
    options is spread as positional constructor arguments.
    """

    def __call__(self, container: ServiceManager, service: str, options: Options = None) -> Any:
        cls = container.locate(service)
        if cls is None:
            msg = f'The class "{service}" does not exist.'
            raise CannotCreateError(msg)

        if options is None:
            return cls()

        if not is_positional(options):
            msg = f'Cannot create service "{service}": Invalid options given.'
            raise InvalidOptionsError(msg)

        return cls(*options)


class DynamicFactory:
    """Abstract factory that finds a ``<service>Factory`` class by naming convention.

    When no such factory class exists but the service id itself names an
    instantiable class, that class is constructed directly.
    """

    suffix = "Factory"

    def __call__(self, container: ServiceManager, service: str, options: Options = None) -> Any:
        if not self.can_create(container, service):
            msg = f'Cannot create service "{service}".'
            raise CannotCreateError(msg)

        factory_cls = self._factory_class(container, service)
        if factory_cls is not None:
            logger.debug("Delegating %r to %s", service, type_name(factory_cls))
            return factory_cls()(container, service, options)

        return InvokableFactory()(container, service, options)

    def can_create(self, container: ServiceManager, service: str) -> bool:
        if self._factory_class(container, service) is not None:
            return True

        cls = container.locate(service)
        return cls is not None and is_instantiable(cls)

    def _factory_class(self, container: ServiceManager, service: str) -> type | None:
        # Only factory classes with callable instances are used.
        factory_cls = container.locate(service + self.suffix)
        if factory_cls is not None and instances_are_callable(factory_cls):
            return factory_cls
        return None
