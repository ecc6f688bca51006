"""Service package public API definitions.

The service classes are imported lazily so that ``petbook.services.exceptions``
can be imported by the HTTP client without pulling in the services that in
turn depend on that client.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AppointmentService",
    "CustomerService",
]

_SERVICE_MODULES = {
    "AppointmentService": "appointment",
    "CustomerService": "customers",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .appointment import AppointmentService as AppointmentService
    from .customers import CustomerService as CustomerService
