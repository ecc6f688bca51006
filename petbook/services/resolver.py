from __future__ import annotations

import unicodedata
from typing import Iterable, List, Optional

from petbook.schemas.customer import Customer, CustomerMatch, MatchCandidate, PetMatch


def _normalize_part(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def format_customer_name(customer: Customer) -> str:
    combined = " ".join(
        part
        for part in (_normalize_part(customer.first_name), _normalize_part(customer.last_name))
        if part
    )
    return combined or _normalize_part(customer.name)


def fold(value: Optional[str]) -> str:
    """Lower-case ``value`` and strip combining accents ("Conceição" -> "conceicao")."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _customer_candidate(customer: Customer, label: str) -> CustomerMatch:
    return CustomerMatch(
        customer=customer,
        label=label,
        subtitle=customer.phone or customer.email or None,
    )


def search(query: Optional[str], roster: Iterable[Customer]) -> List[MatchCandidate]:
    """Match free text against a tenant roster for the booking picker.

    Customers match on display name or phone, pets on name or breed. A blank
    query lists every customer once. Results follow roster order with a
    customer's own candidate ahead of its pets.
    """
    term = fold((query or "").strip())
    results: List[MatchCandidate] = []

    for customer in roster:
        label = format_customer_name(customer)
        if not term:
            results.append(_customer_candidate(customer, label))
            continue

        if term in fold(label) or term in fold(customer.phone):
            results.append(_customer_candidate(customer, label))

        for pet in customer.pets:
            if term in fold(pet.name) or term in fold(pet.breed):
                results.append(
                    PetMatch(
                        customer=customer,
                        pet=pet,
                        label=pet.name,
                        subtitle=label or None,
                    )
                )
    return results
