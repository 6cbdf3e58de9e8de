from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


TransactionType = Literal["deposit", "withdraw", "purchase", "refund"]

TRANSACTION_TYPES: tuple[str, ...] = ("deposit", "withdraw", "purchase", "refund")


@dataclass(frozen=True)
class Transaction:
    id: int
    user_id: str
    type: TransactionType
    amount: int
    description: str
    reference_id: str | None
    created_at: datetime
