from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field

# --- Request Schemas ---

class SessionCreateRequest(BaseModel):
    coding_stage_enabled: Optional[bool] = Field(None, description="Defaults to CODING_STAGE_ENABLED")
    question_mode: Optional[Literal["DYNAMIC", "FIXED"]] = Field(None, description="Defaults to QUESTION_MODE")

class CodeSubmitRequest(BaseModel):
    code: str

# --- Response Schemas ---

class NotificationSchema(BaseModel):
    title: str
    description: str
    level: str
    code: Optional[str] = None
    created_at: datetime
