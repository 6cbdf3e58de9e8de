from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class DepositRequest(BaseModel):
    amount: StrictInt = Field(..., gt=0, description="Whole currency units to credit.")


class PurchaseServerRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    config_id: StrictInt = Field(..., gt=0)
    server_name: str = Field(..., min_length=3, max_length=50)
    months: StrictInt = Field(1, ge=1, le=24)


class ExtendServerRequest(BaseModel):
    months: StrictInt = Field(1, ge=1, le=24)


class BalanceData(BaseModel):
    balance: int


class BalanceResponse(BaseModel):
    success: bool = True
    data: BalanceData


class TransactionResponse(BaseModel):
    id: int
    user_id: str
    type: str
    amount: int
    description: str
    reference_id: str | None
    created_at: datetime


class TransactionListResponse(BaseModel):
    success: bool = True
    data: list[TransactionResponse]


class UserServerResponse(BaseModel):
    id: int
    user_id: str
    config_id: int
    server_name: str
    status: str
    ip_address: str | None
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    config_name: str | None = None
    cpu_cores: int | None = None
    ram_gb: float | None = None
    storage_gb: int | None = None


class UserServerListResponse(BaseModel):
    success: bool = True
    data: list[UserServerResponse]


class ServerOrderData(BaseModel):
    server: UserServerResponse
    new_balance: int


class ServerOrderResponse(BaseModel):
    success: bool = True
    data: ServerOrderData
