from __future__ import annotations

from fastapi import APIRouter, Depends

from whitecat.api.deps import get_submit_contact_use_case
from whitecat.api.schemas.common import MessageResponse
from whitecat.api.schemas.contact import ContactRequest
from whitecat.application.dto.contact import ContactInput
from whitecat.application.use_cases.submit_contact import SubmitContactUseCase


router = APIRouter()


@router.post("/api/contact", response_model=MessageResponse)
def submit_contact(
    req: ContactRequest,
    use_case: SubmitContactUseCase = Depends(get_submit_contact_use_case),
):
    output = use_case.execute(
        ContactInput(
            name=req.name,
            email=req.email,
            phone=req.phone,
            message=req.message,
        )
    )
    return MessageResponse(message=output.message)
