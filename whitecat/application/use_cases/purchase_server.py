from __future__ import annotations

import logging

from whitecat.application.dto.account import PurchaseServerInput, ServerOrderOutput
from whitecat.application.ports.accounts_port import AccountsPort
from whitecat.domain.exceptions import InsufficientBalanceError, NotFoundError, ServerCreationFailedError
from whitecat.domain.services.billing import (
    ensure_affordable,
    ensure_purchasable,
    total_price,
    validate_months,
    validate_server_name,
)
from whitecat.domain.services.calendar import add_months

from .common import utcnow


logger = logging.getLogger(__name__)


class PurchaseServerUseCase:
    """Debit the balance, create the server row and append a purchase ledger entry.

    The three writes run inside one storage transaction. The server insert
    runs under a savepoint, so a rejected row leaves the outer transaction
    usable and the debit is credited back before failing.
    """

    def __init__(self, *, accounts_port: AccountsPort):
        self._accounts_port = accounts_port

    def execute(self, command: PurchaseServerInput) -> ServerOrderOutput:
        months = validate_months(command.months)
        server_name = validate_server_name(command.server_name)

        config = self._accounts_port.get_server_config(config_id=command.config_id)
        if config is None:
            raise NotFoundError("Server configuration not found")
        ensure_purchasable(config)

        price = total_price(config, months)
        balance = self._accounts_port.get_balance(user_id=command.user_id)
        ensure_affordable(balance=balance, required=price)

        def _tx(accounts: AccountsPort) -> ServerOrderOutput:
            now = utcnow()
            if accounts.update_balance(user_id=command.user_id, delta=-price, now=now) is None:
                # Balance changed between the check and the guarded debit.
                current = accounts.get_balance(user_id=command.user_id)
                raise InsufficientBalanceError(required=price, current=current)

            try:
                server = accounts.create_user_server(
                    user_id=command.user_id,
                    config_id=config.id,
                    server_name=server_name,
                    expires_at=add_months(now, months),
                    now=now,
                )
            except Exception as exc:
                _refund(accounts, command.user_id, price)
                logger.warning(
                    "purchase_server: create_failed user_id=%s config_id=%s detail=%s",
                    command.user_id,
                    config.id,
                    exc,
                )
                raise ServerCreationFailedError("Failed to create server") from exc
            if server is None:
                _refund(accounts, command.user_id, price)
                raise ServerCreationFailedError("Failed to create server")

            accounts.create_transaction(
                user_id=command.user_id,
                type="purchase",
                amount=-price,
                description=f"Purchase server {config.name} - {server_name} ({months} months)",
                reference_id=str(server.id),
                now=now,
            )
            return ServerOrderOutput(
                server=server,
                new_balance=accounts.get_balance(user_id=command.user_id),
            )

        output = self._accounts_port.execute_in_transaction(_tx)
        logger.info(
            "purchase_server: purchased user_id=%s server_id=%s config=%s months=%s total=%s",
            command.user_id,
            output.server.id,
            config.name,
            months,
            price,
        )
        return output


def _refund(accounts: AccountsPort, user_id: str, amount: int) -> None:
    accounts.update_balance(user_id=user_id, delta=amount, now=utcnow())
