from __future__ import annotations

import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any

from ._errors import (
    ClassNotFoundError,
    FactoryNotFoundError,
    InvalidAbstractFactoryError,
    InvalidFactoryError,
    InvalidServiceIdError,
    ServiceCreationError,
)
from ._factories import AbstractFactory, InvokableFactory
from ._types import instances_are_callable, locate, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from ._factories import Factory, Options

    FactoryDescriptor = Factory | Callable[..., Any] | type | str
    AbstractFactoryDescriptor = AbstractFactory | type | str


_CONFIG_KEYS = frozenset({"services", "factories", "abstract_factories", "invokables", "aliases"})


class ServiceManager:
    """Registry resolving string ids to services.

    A service comes from, in order of priority:
    - a pre-built instance (`add_service`)
    - an explicit factory (`add_factory`)
    - an invokable class (`add_invokable`)
    - the first abstract factory that reports `can_create` (`add_abstract_factory`).

    `get` caches what it builds, `create_service` always builds a new instance.
    Factories are instantiated once per id and reused.
    """

    def __init__(
        self,
        services: Mapping[str, Any] | None = None,
        factories: Mapping[str, FactoryDescriptor] | None = None,
        abstract_factories: Iterable[AbstractFactoryDescriptor] = (),
        invokables: Iterable[str | type] = (),
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._services: dict[str, Any] = {}
        self._factories: dict[str, Any] = {}
        self._invokables: set[str] = set()
        self._abstract_factories: list[Any] = []
        self._aliases: dict[str, str] = {}
        self._resolved_factories: dict[str, Callable[..., Any]] = {}
        self._resolved_services: dict[str, Any] = {}
        self._resolved_abstract_factories: dict[type, AbstractFactory] = {}
        self._types: dict[str, type] = {}
        self._lock = threading.RLock()

        for id_, service in (services or {}).items():
            self.add_service(id_, service)
        for id_, factory in (factories or {}).items():
            self.add_factory(id_, factory)
        for abstract_factory in abstract_factories:
            self.add_abstract_factory(abstract_factory)
        for invokable in invokables:
            self.add_invokable(invokable)
        for alias, target in (aliases or {}).items():
            self.add_alias(alias, target)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ServiceManager:
        """Build a manager from a configuration mapping.

        Example:
          ServiceManager.from_config({
              "factories": {"db": "app.factories.DatabaseFactory"},
              "invokables": ["app.mail.Mailer"],
              "aliases": {"mailer": "app.mail.Mailer"},
          })

        """
        unknown = set(config) - _CONFIG_KEYS
        if unknown:
            msg = f"Unknown service manager configuration keys: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        return cls(
            services=config.get("services"),
            factories=config.get("factories"),
            abstract_factories=config.get("abstract_factories") or (),
            invokables=config.get("invokables") or (),
            aliases=config.get("aliases"),
        )

    def locate(self, name: str) -> type | None:
        """Find the class a type descriptor names, preferring classes this manager was handed."""
        return self._types.get(name) or locate(name)

    def add_service(self, id: str, service: Any) -> None:
        _check_id(id)
        with self._lock:
            self._services[id] = service

    def add_factory(self, id: str, factory: FactoryDescriptor) -> None:
        """Register a factory for `id`.

        `factory` is a callable, a class whose instances are callable, or the dotted
        name of such a class. Names that do not resolve are rejected right away;
        anything else is only checked when the service is first created.
        """
        _check_id(id)
        if isinstance(factory, str):
            if self.locate(factory) is None:
                msg = f'The factory "{factory}" does not exist.'
                raise InvalidFactoryError(msg)
        elif inspect.isclass(factory):
            self._remember(factory)

        with self._lock:
            self._factories[id] = factory

    def add_invokable(self, id: str | type) -> None:
        """Register a class that is built by calling it, without a dedicated factory.

        The service id is the class's dotted name.
        """
        if inspect.isclass(id):
            id = self._remember(id)

        _check_id(id)
        if self.locate(id) is None:
            msg = f'The class "{id}" does not exist.'
            raise ClassNotFoundError(msg)

        with self._lock:
            self._invokables.add(id)

    def add_abstract_factory(self, abstract_factory: AbstractFactoryDescriptor) -> None:
        if isinstance(abstract_factory, str):
            cls = self.locate(abstract_factory)
            if cls is None:
                msg = f'The abstract factory "{abstract_factory}" does not exist.'
                raise InvalidAbstractFactoryError(msg)
            abstract_factory = cls

        if inspect.isclass(abstract_factory):
            _validate_abstract_factory_class(abstract_factory)
            self._remember(abstract_factory)
        elif not isinstance(abstract_factory, AbstractFactory):
            msg = f'The abstract factory "{abstract_factory!r}" is invalid.'
            raise InvalidAbstractFactoryError(msg)

        with self._lock:
            self._abstract_factories.append(abstract_factory)

    def add_alias(self, alias: str, target: str) -> None:
        """Make `alias` refer to `target`. `target` is not checked until resolution."""
        _check_id(alias)
        _check_id(target)
        with self._lock:
            self._aliases[alias] = target

    def get(self, id: str) -> Any:
        _check_id(id)
        with self._lock:
            resolved = self._aliases.get(id, id)
            if resolved in self._services:
                return self._services[resolved]

            if resolved in self._resolved_services:
                return self._resolved_services[resolved]

            service = self.create_service(id)
            self._resolved_services[resolved] = service
            return service

    def create_service(self, id: str, options: Options = None) -> Any:
        """Build a new instance of `id`, bypassing the service cache.

        Any failure is raised as `ServiceCreationError` naming the requested id,
        with the original error as its cause. Services added with `add_service`
        are returned as they are.
        """
        _check_id(id)
        with self._lock:
            resolved = self._aliases.get(id, id)
            if resolved in self._services:
                return self._services[resolved]

            try:
                factory = self._get_factory(resolved)
                logger.debug("Creating service %r (as %r)", id, resolved)
                return factory(self, resolved, options)
            except RecursionError:
                raise
            except Exception as exc:
                msg = f'The service "{id}" could not be created.'
                raise ServiceCreationError(msg) from exc

    def has(self, id: str) -> bool:
        _check_id(id)
        with self._lock:
            resolved = self._aliases.get(id, id)
            if (
                resolved in self._services
                or resolved in self._resolved_services
                or resolved in self._factories
                or resolved in self._invokables
            ):
                return True

            return self._get_abstract_factory(resolved) is not None

    def remove_service(self, id: str) -> None:
        """Forget everything about `id`. For an alias, the alias and its target are both removed."""
        _check_id(id)
        with self._lock:
            resolved = self._aliases.pop(id, id)
            for table in (self._services, self._factories, self._resolved_factories, self._resolved_services):
                table.pop(resolved, None)
            self._invokables.discard(resolved)

    def __getitem__(self, id: str) -> Any:
        return self.get(id)

    def __setitem__(self, id: str, service: Any) -> None:
        self.add_service(id, service)

    def __delitem__(self, id: str) -> None:
        self.remove_service(id)

    def __contains__(self, id: object) -> bool:
        return self.has(id)  # type: ignore[arg-type]

    def _remember(self, cls: type) -> str:
        name = type_name(cls)
        self._types[name] = cls
        return name

    def _get_factory(self, id: str) -> Callable[..., Any]:
        if id in self._resolved_factories:
            return self._resolved_factories[id]

        if id in self._factories:
            candidate = self._factories[id]
        elif id in self._invokables:
            candidate = InvokableFactory()
        else:
            candidate = self._get_abstract_factory(id)

        if candidate is None:
            msg = f'Factory for service "{id}" not found.'
            raise FactoryNotFoundError(msg)

        if isinstance(candidate, str):
            candidate = self.locate(candidate)

        # Classes are callable too; instantiate them before the callable check.
        if inspect.isclass(candidate):
            candidate = candidate()

        if not callable(candidate):
            msg = f'The factory for service "{id}" is invalid.'
            raise InvalidFactoryError(msg)

        logger.debug("Resolved factory for %r: %r", id, candidate)
        self._resolved_factories[id] = candidate
        return candidate

    def _get_abstract_factory(self, id: str) -> AbstractFactory | None:
        for entry in self._abstract_factories:
            abstract_factory = self._resolve_abstract_factory(entry)
            if abstract_factory.can_create(self, id):
                return abstract_factory

        return None

    def _resolve_abstract_factory(self, entry: Any) -> AbstractFactory:
        # Class entries were validated by `add_abstract_factory`.
        if not inspect.isclass(entry):
            return entry

        if entry not in self._resolved_abstract_factories:
            logger.debug("Instantiated abstract factory %s", type_name(entry))
            self._resolved_abstract_factories[entry] = entry()

        return self._resolved_abstract_factories[entry]


def _check_id(id: object) -> None:
    if not isinstance(id, str):
        msg = "The service ID must be of type string."
        raise InvalidServiceIdError(msg)


def _validate_abstract_factory_class(cls: type) -> None:
    """Check that instances of `cls` would conform to `AbstractFactory`.

    Instances must be callable, and `can_create` must take ``(container, service)``.
    """
    problems: list[str] = []
    if not instances_are_callable(cls):
        problems.append("instances are not callable")

    can_create = getattr(cls, "can_create", None)
    if can_create is None:
        problems.append("missing members: can_create")
    elif not callable(can_create):
        problems.append(f"signature mismatches: can_create: not Callable on {cls.__name__}")
    else:
        try:
            params = [p for p in inspect.signature(can_create).parameters.values() if p.name != "self"]
        except (TypeError, ValueError) as e:
            problems.append(f"signature mismatches: can_create: unable to inspect signature ({e})")
        else:
            if not _accepts_two_positional(params):
                problems.append("signature mismatches: can_create must accept (container, service)")

    if problems:
        msg = f'The abstract factory "{type_name(cls)}" is invalid: {"; ".join(problems)}'
        raise InvalidAbstractFactoryError(msg)


def _accepts_two_positional(params: list[inspect.Parameter]) -> bool:
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    required = [p for p in positional if p.default is p.empty]
    has_varargs = any(p.kind is p.VAR_POSITIONAL for p in params)
    required_kwonly = any(p.kind is p.KEYWORD_ONLY and p.default is p.empty for p in params)
    return len(required) <= 2 and (len(positional) >= 2 or has_varargs) and not required_kwonly
