from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from whitecat.api.deps import (
    get_current_user,
    get_deposit_use_case,
    get_extend_server_use_case,
    get_get_balance_use_case,
    get_list_transactions_use_case,
    get_list_user_servers_use_case,
    get_purchase_server_use_case,
)
from whitecat.api.schemas.user import (
    BalanceData,
    BalanceResponse,
    DepositRequest,
    ExtendServerRequest,
    PurchaseServerRequest,
    ServerOrderData,
    ServerOrderResponse,
    TransactionListResponse,
    TransactionResponse,
    UserServerListResponse,
    UserServerResponse,
)
from whitecat.application.dto.account import (
    DepositInput,
    ExtendServerInput,
    ListTransactionsInput,
    PurchaseServerInput,
    ServerOrderOutput,
)
from whitecat.application.use_cases.deposit import DepositUseCase
from whitecat.application.use_cases.extend_server import ExtendServerUseCase
from whitecat.application.use_cases.get_balance import GetBalanceUseCase
from whitecat.application.use_cases.list_transactions import ListTransactionsUseCase
from whitecat.application.use_cases.list_user_servers import ListUserServersUseCase
from whitecat.application.use_cases.purchase_server import PurchaseServerUseCase
from whitecat.domain.entities.user import User
from whitecat.domain.entities.user_server import UserServer


router = APIRouter(prefix="/api/user")


def _server_response(server: UserServer) -> UserServerResponse:
    return UserServerResponse(
        id=server.id,
        user_id=server.user_id,
        config_id=server.config_id,
        server_name=server.server_name,
        status=server.status,
        ip_address=server.ip_address,
        expires_at=server.expires_at,
        created_at=server.created_at,
        updated_at=server.updated_at,
        config_name=server.config_name,
        cpu_cores=server.cpu_cores,
        ram_gb=server.ram_gb,
        storage_gb=server.storage_gb,
    )


def _order_response(output: ServerOrderOutput) -> ServerOrderResponse:
    return ServerOrderResponse(
        data=ServerOrderData(
            server=_server_response(output.server),
            new_balance=output.new_balance,
        )
    )


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    user: User = Depends(get_current_user),
    use_case: GetBalanceUseCase = Depends(get_get_balance_use_case),
):
    return BalanceResponse(data=BalanceData(balance=use_case.execute(user_id=user.id)))


@router.post("/deposit", response_model=BalanceResponse)
def deposit(
    req: DepositRequest,
    user: User = Depends(get_current_user),
    use_case: DepositUseCase = Depends(get_deposit_use_case),
):
    output = use_case.execute(DepositInput(user_id=user.id, amount=req.amount))
    return BalanceResponse(data=BalanceData(balance=output.balance))


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    use_case: ListTransactionsUseCase = Depends(get_list_transactions_use_case),
):
    items = use_case.execute(ListTransactionsInput(user_id=user.id, limit=limit))
    return TransactionListResponse(
        data=[
            TransactionResponse(
                id=item.id,
                user_id=item.user_id,
                type=item.type,
                amount=item.amount,
                description=item.description,
                reference_id=item.reference_id,
                created_at=item.created_at,
            )
            for item in items
        ]
    )


@router.get("/servers", response_model=UserServerListResponse)
def list_servers(
    user: User = Depends(get_current_user),
    use_case: ListUserServersUseCase = Depends(get_list_user_servers_use_case),
):
    return UserServerListResponse(
        data=[_server_response(server) for server in use_case.execute(user_id=user.id)]
    )


@router.post("/servers", response_model=ServerOrderResponse)
def purchase_server(
    req: PurchaseServerRequest,
    user: User = Depends(get_current_user),
    use_case: PurchaseServerUseCase = Depends(get_purchase_server_use_case),
):
    output = use_case.execute(
        PurchaseServerInput(
            user_id=user.id,
            config_id=req.config_id,
            server_name=req.server_name,
            months=req.months,
        )
    )
    return _order_response(output)


@router.post("/servers/{server_id}/extend", response_model=ServerOrderResponse)
def extend_server(
    server_id: int,
    req: ExtendServerRequest | None = None,
    user: User = Depends(get_current_user),
    use_case: ExtendServerUseCase = Depends(get_extend_server_use_case),
):
    months = req.months if req is not None else 1
    output = use_case.execute(ExtendServerInput(user_id=user.id, server_id=server_id, months=months))
    return _order_response(output)
