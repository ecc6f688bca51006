from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field


class Pet(BaseModel):
    pet_id: str
    name: str
    breed: Optional[str] = None
    weight: Optional[float] = None
    photo_url: Optional[str] = None


class Customer(BaseModel):
    customer_id: str
    tenant_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None  # legacy combined name
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    address2: Optional[str] = None
    nif: Optional[str] = None
    photo_url: Optional[str] = None
    pets: List[Pet] = Field(default_factory=list)


class CustomerMatch(BaseModel):
    """A customer picked as a whole."""

    type: Literal["customer"] = "customer"
    customer: Customer
    label: str
    subtitle: Optional[str] = None

    def selection(self) -> Tuple[str, Optional[str]]:
        return self.customer.customer_id, None


class PetMatch(BaseModel):
    """A pet picked together with its owner."""

    type: Literal["pet"] = "pet"
    customer: Customer
    pet: Pet
    label: str
    subtitle: Optional[str] = None

    def selection(self) -> Tuple[str, Optional[str]]:
        return self.customer.customer_id, self.pet.pet_id


MatchCandidate = Annotated[Union[CustomerMatch, PetMatch], Field(discriminator="type")]


class CustomerSearchRequest(BaseModel):
    tenant_id: str
    query: str = Field("", description="Free text typed into the customer picker")


class CustomerSearchResponse(BaseModel):
    query: str
    total: int
    items: List[MatchCandidate]
