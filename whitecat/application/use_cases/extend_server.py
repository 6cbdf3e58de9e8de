from __future__ import annotations

import logging

from whitecat.application.dto.account import ExtendServerInput, ServerOrderOutput
from whitecat.application.ports.accounts_port import AccountsPort
from whitecat.domain.exceptions import InsufficientBalanceError, InvalidStateError, NotFoundError
from whitecat.domain.services.billing import ensure_affordable, total_price, validate_months

from .common import utcnow


logger = logging.getLogger(__name__)


class ExtendServerUseCase:
    def __init__(self, *, accounts_port: AccountsPort):
        self._accounts_port = accounts_port

    def execute(self, command: ExtendServerInput) -> ServerOrderOutput:
        months = validate_months(command.months)

        server = self._accounts_port.get_user_server(server_id=command.server_id)
        # Someone else's server is reported exactly like a missing one.
        if server is None or server.user_id != command.user_id:
            raise NotFoundError("Server not found")

        config = self._accounts_port.get_server_config(config_id=server.config_id)
        if config is None:
            raise NotFoundError("Server configuration not found")

        price = total_price(config, months)
        balance = self._accounts_port.get_balance(user_id=command.user_id)
        ensure_affordable(balance=balance, required=price)

        def _tx(accounts: AccountsPort) -> ServerOrderOutput:
            now = utcnow()
            if accounts.update_balance(user_id=command.user_id, delta=-price, now=now) is None:
                current = accounts.get_balance(user_id=command.user_id)
                raise InsufficientBalanceError(required=price, current=current)

            extended = accounts.extend_user_server(server_id=server.id, months=months, now=now)
            if extended is None:
                accounts.update_balance(user_id=command.user_id, delta=price, now=utcnow())
                raise InvalidStateError("Server was modified concurrently, try again")

            accounts.create_transaction(
                user_id=command.user_id,
                type="purchase",
                amount=-price,
                description=f"Extend server {server.server_name} ({months} months)",
                reference_id=str(server.id),
                now=now,
            )
            return ServerOrderOutput(
                server=extended,
                new_balance=accounts.get_balance(user_id=command.user_id),
            )

        output = self._accounts_port.execute_in_transaction(_tx)
        logger.info(
            "extend_server: extended user_id=%s server_id=%s months=%s total=%s expires_at=%s",
            command.user_id,
            server.id,
            months,
            price,
            output.server.expires_at.isoformat(),
        )
        return output
