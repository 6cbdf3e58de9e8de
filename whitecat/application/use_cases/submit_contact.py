from __future__ import annotations

import logging

from whitecat.application.dto.contact import ContactInput, ContactOutput
from whitecat.domain.exceptions import ValidationError

from .common import utcnow


logger = logging.getLogger(__name__)

THANK_YOU_MESSAGE = "Thank you for contacting WhiteCat Hosting! We will respond soon."


class SubmitContactUseCase:
    def execute(self, command: ContactInput) -> ContactOutput:
        name = (command.name or "").strip()
        email = (command.email or "").strip()
        message = (command.message or "").strip()
        phone = command.phone.strip() if command.phone else None

        errors: list[dict[str, str]] = []
        if len(name) < 2:
            errors.append({"field": "name", "message": "Name must be at least 2 characters"})
        if "@" not in email:
            errors.append({"field": "email", "message": "Valid email is required"})
        if len(message) < 10:
            errors.append({"field": "message", "message": "Message must be at least 10 characters"})
        if errors:
            raise ValidationError(errors[0]["message"], errors=errors)

        logger.info(
            "contact: submission name=%s email=%s phone=%s message=%r timestamp=%s",
            name,
            email,
            phone,
            message,
            utcnow().isoformat(),
        )
        return ContactOutput(message=THANK_YOU_MESSAGE)
