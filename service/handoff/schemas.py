from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ProgramInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    title: str = ""
    url: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.id or self.title or self.url)


class InquiryPayload(BaseModel):
    """Booking inquiry as submitted by the site, trimmed and validated."""

    model_config = ConfigDict(frozen=True)

    name: str
    contact: str
    date: str
    guests: str
    message: str = ""
    program: ProgramInfo = Field(default_factory=ProgramInfo)


# API Request/Response models

class PrestartResponse(BaseModel):
    ok: bool = True
    token: str
    url: Optional[str] = Field(None, description="Telegram deep link, absent until the bot username is known")


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
