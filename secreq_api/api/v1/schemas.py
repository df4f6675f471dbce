from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthenticatedRequest(BaseModel):
    """Body fields shared by the AI proxy endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    # Must equal the session principal's id.
    user_id: str = Field(..., alias="userId", min_length=1)


class GenerateTextRequest(AuthenticatedRequest):
    prompt: str = Field(..., min_length=1)


class GenerateTextResponse(BaseModel):
    text: str


def clean_text(value: str) -> str:
    return value.replace("\x00", "").strip()


class EmbedRequest(AuthenticatedRequest):
    texts: List[str] = Field(..., min_length=1, description="Texts to embed; NUL bytes and surrounding whitespace are removed.")

    @field_validator("texts")
    @classmethod
    def clean_texts(cls, texts: List[str]) -> List[str]:
        cleaned = []
        for index, value in enumerate(texts):
            text = clean_text(value)
            if not text:
                raise ValueError(f"texts[{index}] is empty")
            cleaned.append(text)
        return cleaned


class EmbedResponse(BaseModel):
    embeddings: List[List[float]] = Field(..., description="One vector per input text, in input order.")


class NotifySignupResponse(BaseModel):
    ok: bool = True
    skipped: Optional[bool] = None


class AcceptInviteRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AcceptInviteResponse(BaseModel):
    message: str
    organization_id: Optional[str] = None
    role: Optional[str] = None


class SendInviteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    invite_id: str = Field(..., alias="inviteId", min_length=1)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
    details: Optional[str] = None
