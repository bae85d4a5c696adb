"""
Contact form endpoint
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.schemas.contact import ContactRequest
from app.schemas.grades import SuccessResponse
from app.services.email import email_service

router = APIRouter()


@router.post("", response_model=SuccessResponse, response_model_exclude_none=True)
async def contact(payload: ContactRequest):
    """Forward the message to the contact inbox"""
    sent = await email_service.send_contact_message(payload.nom, payload.email, payload.message)
    if not sent:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Envoi impossible, réessayez plus tard."},
        )
    return SuccessResponse(message="Message envoyé.")
