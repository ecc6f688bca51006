from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from petbook.clients.backend import BackendClient
from petbook.config import Settings, get_settings
from petbook.services import AppointmentService, CustomerService


@lru_cache(maxsize=1)
def get_backend_client_cached() -> BackendClient:
    settings = get_settings()
    return BackendClient(
        settings.backend_base_url,
        timeout=settings.backend_timeout,
        use_mock_data=settings.use_mock_data,
        token=settings.backend_token,
    )


def get_backend_client(settings: Settings = Depends(get_settings)) -> BackendClient:
    return get_backend_client_cached()


def get_appointment_service(
    client: BackendClient = Depends(get_backend_client),
    settings: Settings = Depends(get_settings),
) -> AppointmentService:
    return AppointmentService(client, max_occurrences=settings.max_recurrence_occurrences)


def get_customer_service(
    client: BackendClient = Depends(get_backend_client),
) -> CustomerService:
    return CustomerService(client)
