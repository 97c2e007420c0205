"""Request and response schemas for the HTTP API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TurnPayload(BaseModel):
    sender: str = Field(pattern="^(self|counterpart)$")
    content: str
    timestamp: Optional[datetime] = None


class InboundMessageRequest(BaseModel):
    id: str
    sender_id: str
    sender_name: str
    sender_title: Optional[str] = None
    sender_company: Optional[str] = None
    content: str
    timestamp: Optional[datetime] = None
    # Full thread as currently shown by the platform; replaces stored history when present
    conversation_turns: Optional[List[TurnPayload]] = None


class ProcessedMessageResponse(BaseModel):
    status: str
    conversation_id: str
    category: Optional[str] = None
    language: Optional[str] = None
    fit_score: Optional[int] = None
    recommendation: Optional[str] = None
    phase: Optional[str] = None
    reply: Optional[str] = None
    degraded: List[str] = Field(default_factory=list)


class ResponseRecordPayload(BaseModel):
    conversation_id: str
    counterpart_name: str
    responded_at: datetime
    inbound_content: str
    outbound_content: str
