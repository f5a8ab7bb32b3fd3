from __future__ import annotations


class ContainerError(RuntimeError):
    """Base class for every error raised by the service manager."""


class ClassNotFoundError(ContainerError, LookupError):
    pass


class InvalidFactoryError(ContainerError, TypeError):
    pass


class InvalidAbstractFactoryError(ContainerError, TypeError):
    pass


class FactoryNotFoundError(ContainerError, LookupError):
    pass


class ResolutionError(ContainerError):
    """A constructor argument could not be supplied."""


class ParameterNotResolvableError(ResolutionError):
    pass


class DependencyNotFoundError(ResolutionError, LookupError):
    pass


class CannotCreateError(ContainerError):
    pass


class InvalidOptionsError(ContainerError, ValueError):
    pass


class ServiceCreationError(ContainerError):
    """Raised by `create_service`/`get`; the underlying error is `__cause__`."""


class InvalidServiceIdError(ContainerError, TypeError):
    pass
