"""Loan application contract."""

from __future__ import annotations

from ledgerstore.constants import LoanStatus
from ledgerstore.contracts.base import Contract
from ledgerstore.errors import AlreadyInTargetStateError
from ledgerstore.records import LoanApplication


class LoanContract(Contract[LoanApplication]):
    name = "loans"
    record_type = LoanApplication

    def initial_records(self) -> list[LoanApplication]:
        return [
            LoanApplication(
                id="loan1", applicant="Afraz", amount=10000, term=12,
                interest_rate=5.5, status=LoanStatus.PENDING.value,
            ),
            LoanApplication(
                id="loan2", applicant="Alam", amount=5000, term=6,
                interest_rate=4.2, status=LoanStatus.APPROVED.value,
            ),
        ]

    async def create_loan_application(
        self, id: str, applicant: str, amount: int, term: int, interest_rate: float,
    ) -> LoanApplication:
        """New applications always start Pending."""
        loan = LoanApplication(
            id=id,
            applicant=applicant,
            amount=amount,
            term=term,
            interest_rate=interest_rate,
            status=LoanStatus.PENDING.value,
        )
        await self.store.create(id, loan)
        return loan

    async def read_loan_application(self, id: str) -> LoanApplication:
        return await self.store.read(id)

    async def update_loan_status(self, id: str, new_status: str) -> LoanApplication:
        def _set_status(loan: LoanApplication) -> None:
            if loan.status == new_status:
                raise AlreadyInTargetStateError(
                    f"the loan application {id} is already {new_status}", key=id
                )
            loan.status = new_status

        return await self.store.update(id, _set_status)

    async def delete_loan_application(self, id: str) -> str:
        return await self.store.delete(id)

    async def loan_exists(self, id: str) -> bool:
        return await self.store.exists(id)

    async def get_all_loan_applications(self) -> list[LoanApplication]:
        return await self.get_all()
