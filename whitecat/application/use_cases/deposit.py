from __future__ import annotations

import logging

from whitecat.application.dto.account import DepositInput, DepositOutput
from whitecat.application.ports.accounts_port import AccountsPort
from whitecat.domain.exceptions import NotFoundError
from whitecat.domain.services.billing import validate_deposit_amount

from .common import utcnow


logger = logging.getLogger(__name__)


class DepositUseCase:
    def __init__(self, *, accounts_port: AccountsPort):
        self._accounts_port = accounts_port

    def execute(self, command: DepositInput) -> DepositOutput:
        amount = validate_deposit_amount(command.amount)

        def _tx(accounts: AccountsPort) -> DepositOutput:
            now = utcnow()
            balance = accounts.update_balance(user_id=command.user_id, delta=amount, now=now)
            if balance is None:
                raise NotFoundError("User not found")
            accounts.create_transaction(
                user_id=command.user_id,
                type="deposit",
                amount=amount,
                description="Account deposit",
                reference_id=None,
                now=now,
            )
            return DepositOutput(balance=balance)

        output = self._accounts_port.execute_in_transaction(_tx)
        # No payment gateway is wired in; deposits are credited as requested.
        logger.info(
            "deposit: deposit_without_payment_gateway user_id=%s amount=%s balance=%s",
            command.user_id,
            amount,
            output.balance,
        )
        return output
