from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol


if TYPE_CHECKING:
    from ._container import Container


class ServiceProvider(Protocol):
    """Generic "type -> instance" service lookup, as host frameworks expect it."""

    def get_service(self, service_type: Any) -> object: ...


class ContainerServiceProvider:
    """Expose a Container through the ServiceProvider interface.

    Errors from the container propagate unchanged.
    """

    def __init__(self, container: Container) -> None:
        self._container = container

    def get_service(self, service_type: Any) -> object:
        return self._container.resolve(service_type)

    def __getitem__(self, service_type: Any) -> object:
        return self._container.resolve(service_type)

    def __contains__(self, service_type: object) -> bool:
        return self._container.is_registered(service_type, exact=True)
