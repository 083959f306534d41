"""
Prestart API.

The site posts the booking form here, gets a token and a t.me deep link,
and sends the visitor to the bot with it.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from handoff.errors import InquiryValidationError
from handoff.logging_config import logger
from handoff.middleware.body_limit import read_json_body
from handoff.schemas import ErrorResponse, PrestartResponse
from handoff.services.handoff import HandoffService
from handoff.telegram_bot.bot import get_handoff_service

router = APIRouter(tags=["prestart"])


@router.post(
    "/prestart",
    response_model=PrestartResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def prestart(
    body: Any = Depends(read_json_body),
    service: HandoffService = Depends(get_handoff_service),
):
    """Store an inquiry for later redemption through /start <token>."""
    try:
        result = await service.intake(body)
    except InquiryValidationError as e:
        return JSONResponse(status_code=400, content={"ok": False, "error": str(e)})
    except Exception as e:
        logger.error(f"[PRESTART] error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"ok": False, "error": "Internal error"})

    return PrestartResponse(token=result.token, url=result.url)
