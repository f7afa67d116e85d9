"""Personal identity contract."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from ledgerstore.contracts.base import Contract
from ledgerstore.errors import InvalidArgumentError
from ledgerstore.records import Identity

# Attributes create_identity() takes as named arguments.
_CORE_FIELDS = frozenset({
    "id", "title", "first_name", "last_name", "cnic",
    "date_of_birth", "gender", "mobile_number",
})
_DETAIL_FIELDS = frozenset(f.name for f in fields(Identity)) - _CORE_FIELDS


class IdentityContract(Contract[Identity]):
    name = "identities"
    record_type = Identity

    def initial_records(self) -> list[Identity]:
        return [
            Identity(
                id="identity1",
                title="Mr.",
                first_name="John",
                last_name="Doe",
                cnic="12345-6789012-3",
                date_of_birth="01-01-1980",
                gender="Male",
                mobile_number="03001234567",
            ),
        ]

    async def create_identity(
        self,
        id: str,
        title: str,
        first_name: str,
        last_name: str,
        cnic: str,
        dob: str,
        gender: str,
        mobile: str,
        **details: Any,
    ) -> Identity:
        """Issue a new identity.

        ``details`` may set any other Identity attribute by its Python
        name (``middle_name``, ``address``, ...).
        """
        unknown = set(details) - _DETAIL_FIELDS
        if unknown:
            raise InvalidArgumentError(
                f"unknown identity field(s): {', '.join(sorted(unknown))}", key=id
            )
        identity = Identity(
            id=id,
            title=title,
            first_name=first_name,
            last_name=last_name,
            cnic=cnic,
            date_of_birth=dob,
            gender=gender,
            mobile_number=mobile,
            **details,
        )
        await self.store.create(id, identity)
        return identity

    async def read_identity(self, id: str) -> Identity:
        return await self.store.read(id)

    async def update_identity(
        self, id: str, mobile: str | None = None, address: str | None = None,
    ) -> Identity:
        """Change contact details; a None or empty argument keeps the stored value."""
        if not mobile and not address:
            raise InvalidArgumentError("No fields to update", key=id)

        def _update(identity: Identity) -> None:
            if mobile:
                identity.mobile_number = mobile
            if address:
                identity.address = address

        return await self.store.update(id, _update)

    async def delete_identity(self, id: str) -> str:
        return await self.store.delete(id)

    async def identity_exists(self, id: str) -> bool:
        return await self.store.exists(id)

    async def get_all_identities(self) -> list[Identity]:
        return await self.get_all()
