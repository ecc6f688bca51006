import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from petbook.schemas.customer import Customer, CustomerMatch, Pet, PetMatch
from petbook.services.resolver import format_customer_name, search


@pytest.fixture
def roster():
    return [
        Customer(
            customer_id="CUS-1",
            tenant_id="acc-1",
            first_name="Ana",
            last_name="Silva",
            phone="912345678",
            pets=[
                Pet(pet_id="PET-1", name="Bobi", breed="Labrador"),
                Pet(pet_id="PET-2", name="Mia", breed="Siamês"),
            ],
        ),
        Customer(
            customer_id="CUS-2",
            tenant_id="acc-1",
            name="Rui Costa",
            email="rui@example.com",
            pets=[Pet(pet_id="PET-3", name="Tobias", breed=None)],
        ),
    ]


def _summary(candidates):
    return [
        (candidate.type, candidate.label)
        for candidate in candidates
    ]


def test_pet_name_match_returns_only_that_pet(roster) -> None:
    results = search("bo", roster[:1])

    assert len(results) == 1
    assert isinstance(results[0], PetMatch)
    assert results[0].pet.name == "Bobi"
    assert results[0].subtitle == "Ana Silva"
    assert results[0].selection() == ("CUS-1", "PET-1")


def test_empty_query_lists_each_customer_once(roster) -> None:
    assert _summary(search("", roster[:1])) == [("customer", "Ana Silva")]
    assert _summary(search("   ", roster)) == [
        ("customer", "Ana Silva"),
        ("customer", "Rui Costa"),
    ]
    assert _summary(search(None, roster)) == _summary(search("", roster))


def test_customer_and_multiple_pets_can_all_match(roster) -> None:
    results = search("a", roster[:1])

    assert _summary(results) == [
        ("customer", "Ana Silva"),
        ("pet", "Bobi"),
        ("pet", "Mia"),
    ]


def test_pet_match_does_not_require_owner_match(roster) -> None:
    results = search("MIA", roster)

    assert _summary(results) == [("pet", "Mia")]
    assert results[0].customer.customer_id == "CUS-1"


def test_breed_match_ignores_accents(roster) -> None:
    assert _summary(search("siames", roster)) == [("pet", "Mia")]


def test_phone_matches_customer_only(roster) -> None:
    results = search("2345", roster)

    assert _summary(results) == [("customer", "Ana Silva")]
    assert isinstance(results[0], CustomerMatch)
    assert results[0].subtitle == "912345678"
    assert results[0].selection() == ("CUS-1", None)


def test_results_follow_roster_order(roster) -> None:
    results = search("o", roster)

    assert _summary(results) == [
        ("pet", "Bobi"),
        ("customer", "Rui Costa"),
        ("pet", "Tobias"),
    ]
    assert results[1].subtitle == "rui@example.com"


def test_no_match_returns_empty_list(roster) -> None:
    assert search("zzz", roster) == []


def test_display_name_prefers_first_and_last_name() -> None:
    split = Customer(customer_id="1", tenant_id="t", first_name=" Ana ", last_name=None, name="Legacy")
    legacy = Customer(customer_id="2", tenant_id="t", name=" Legacy Name ")

    assert format_customer_name(split) == "Ana"
    assert format_customer_name(legacy) == "Legacy Name"
