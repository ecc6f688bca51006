from fastapi import APIRouter, Depends

from petbook.dependencies.services import get_customer_service
from petbook.schemas.customer import CustomerSearchRequest, CustomerSearchResponse
from petbook.services import CustomerService
from petbook.services.exceptions import ServiceError
from petbook.tools.errors import http_error

router = APIRouter()


@router.post("/search", response_model=CustomerSearchResponse)
async def search_customers(
    req: CustomerSearchRequest,
    service: CustomerService = Depends(get_customer_service),
):
    try:
        return await service.search(req)
    except ServiceError as exc:
        raise http_error(exc) from exc
