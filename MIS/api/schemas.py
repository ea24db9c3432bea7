from typing import Optional
from pydantic import BaseModel, Field

# --- Request Schemas ---

class SessionCreateRequest(BaseModel):
    user_id: str = Field(..., description="Candidate id provided by the authentication gate")
    entry_key: Optional[str] = Field(None, description="Idempotency key of the 'new interview' entry")

class AnswerRequest(BaseModel):
    answer: Optional[str] = Field(None, description="Answer being edited for the current question; omitted means unchanged")

# --- Response Schemas ---

class RedirectResponse(BaseModel):
    session_id: str
    redirect: str
