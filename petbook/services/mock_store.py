from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional

from petbook.schemas.appointment import Appointment, AppointmentStatus, PaymentStatus
from petbook.schemas.customer import Customer, Pet

DEMO_TENANT_ID = "acc-demo"


class _BaseRepository:
    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter):05d}"


class CustomerRepository(_BaseRepository):
    def __init__(self) -> None:
        super().__init__("CUS")
        self._customers: Dict[str, Customer] = {}
        self._pet_counter = itertools.count(1)
        self._seed_defaults()

    def _seed_defaults(self) -> None:
        self.add(
            Customer(
                customer_id="",
                tenant_id=DEMO_TENANT_ID,
                first_name="Ana",
                last_name="Silva",
                phone="+351912345678",
                email="ana.silva@example.com",
                address="Rua das Flores 12",
                pets=[
                    Pet(pet_id="", name="Bobi", breed="Labrador Retriever", weight=28.5),
                    Pet(pet_id="", name="Mia", breed="Persa", weight=4.2),
                ],
            )
        )
        self.add(
            Customer(
                customer_id="",
                tenant_id=DEMO_TENANT_ID,
                first_name="João",
                last_name="Conceição",
                phone="+351934000111",
                pets=[Pet(pet_id="", name="Rex", breed="Pastor Alemão", weight=32.0)],
            )
        )
        self.add(
            Customer(
                customer_id="",
                tenant_id=DEMO_TENANT_ID,
                name="Marta Rocha",
                email="marta@example.com",
            )
        )

    def add(self, customer: Customer) -> Customer:
        customer_id = customer.customer_id or self._next_id()
        pets = [
            pet if pet.pet_id else pet.model_copy(update={"pet_id": f"PET-{next(self._pet_counter):05d}"})
            for pet in customer.pets
        ]
        stored = customer.model_copy(update={"customer_id": customer_id, "pets": pets})
        self._customers[customer_id] = stored
        return stored

    async def list(self, tenant_id: str) -> List[Customer]:
        return [
            customer.model_copy(deep=True)
            for customer in self._customers.values()
            if customer.tenant_id == tenant_id
        ]


class AppointmentRepository(_BaseRepository):
    def __init__(self, customers: CustomerRepository | None = None) -> None:
        super().__init__("APT")
        self._customers = customers
        self._appointments: Dict[str, Appointment] = {}
        self._seed_defaults()

    def _seed_defaults(self) -> None:
        if not self._customers:
            return
        ana = next(
            (c for c in self._customers._customers.values() if c.first_name == "Ana"),
            None,
        )
        if not ana:
            return

        seeds = [
            Appointment(
                tenant_id=DEMO_TENANT_ID,
                customer_id=ana.customer_id,
                pet_id=ana.pets[0].pet_id,
                service_ids=["SRV-BATH"],
                date="2025-06-02",
                time="10:00",
                duration_minutes=60,
                status=AppointmentStatus.COMPLETED,
                payment_status=PaymentStatus.UNPAID,
            ),
            Appointment(
                tenant_id=DEMO_TENANT_ID,
                customer_id=ana.customer_id,
                pet_id=ana.pets[1].pet_id,
                service_ids=["SRV-TRIM"],
                date="2025-06-20",
                time="15:30",
                duration_minutes=45,
            ),
        ]
        for record in seeds:
            self._store(record)

    def _store(self, appointment: Appointment) -> Appointment:
        appointment_id = appointment.appointment_id or self._next_id()
        stored = appointment.model_copy(update={"appointment_id": appointment_id})
        self._appointments[appointment_id] = stored
        return stored.model_copy(deep=True)

    async def create(self, appointment: Appointment) -> Appointment:
        return self._store(appointment.model_copy(update={"appointment_id": None}))

    async def list(self, tenant_id: str) -> List[Appointment]:
        return [
            record.model_copy(deep=True)
            for record in self._appointments.values()
            if record.tenant_id == tenant_id
        ]

    async def list_series(self, series_id: str) -> List[Appointment]:
        return [
            record.model_copy(deep=True)
            for record in self._appointments.values()
            if record.series_id == series_id
        ]

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        record = self._appointments.get(appointment_id)
        return record.model_copy(deep=True) if record is not None else None

    async def update(self, appointment: Appointment) -> Appointment:
        if appointment.appointment_id not in self._appointments:
            raise KeyError(f"Appointment {appointment.appointment_id} not found")
        return self._store(appointment)

    async def delete(self, appointment_id: str) -> bool:
        return self._appointments.pop(appointment_id, None) is not None

    async def delete_series(self, series_id: str) -> int:
        doomed = [key for key, record in self._appointments.items() if record.series_id == series_id]
        for key in doomed:
            del self._appointments[key]
        return len(doomed)


@dataclass
class MockDataStore:
    customers: CustomerRepository
    appointments: AppointmentRepository


_mock_store: Optional[MockDataStore] = None


def get_mock_store() -> MockDataStore:
    global _mock_store
    if _mock_store is None:
        customers = CustomerRepository()
        appointments = AppointmentRepository(customers)
        _mock_store = MockDataStore(customers=customers, appointments=appointments)
    return _mock_store


def reset_mock_store() -> None:
    global _mock_store
    _mock_store = None
