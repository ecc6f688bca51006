from __future__ import annotations

import logging
from typing import List

from petbook.clients.backend import BackendClient
from petbook.schemas.customer import Customer, CustomerSearchRequest, CustomerSearchResponse
from petbook.services import resolver
from petbook.services.exceptions import ServiceError
from petbook.services.mock_store import CustomerRepository, get_mock_store

logger = logging.getLogger(__name__)


class CustomerService:
    """Loads a tenant's customer roster and resolves picker input against it."""

    def __init__(
        self,
        client: BackendClient,
        *,
        repository: CustomerRepository | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().customers

    async def roster(self, tenant_id: str) -> List[Customer]:
        logger.info("Loading customer roster for tenant %s", tenant_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock customer repository not configured")
            return await self._repository.list(tenant_id)

        try:
            data = await self._client.get("/customers", params={"tenant_id": tenant_id, "include": "pets"})
            items = data.get("items", []) if isinstance(data, dict) else data or []
            return [Customer(**item) for item in items]
        except ServiceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected error while loading customers")
            raise ServiceError("Failed to load customers", cause=exc)

    async def search(self, request: CustomerSearchRequest) -> CustomerSearchResponse:
        logger.info("Searching customers of tenant %s for '%s'", request.tenant_id, request.query)
        customers = await self.roster(request.tenant_id)
        candidates = resolver.search(request.query, customers)
        return CustomerSearchResponse(query=request.query, total=len(candidates), items=candidates)
