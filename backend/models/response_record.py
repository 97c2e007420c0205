"""Response tracker record model."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class ResponseRecord:
    """The single live automated reply for a conversation identity."""
    conversation_id: str
    counterpart_name: str
    responded_at: datetime
    inbound_content: str
    outbound_content: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conversation_id": self.conversation_id,
            "counterpart_name": self.counterpart_name,
            "responded_at": self.responded_at.isoformat(),
            "inbound_content": self.inbound_content,
            "outbound_content": self.outbound_content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResponseRecord":
        responded_at = datetime.fromisoformat(data["responded_at"])
        if responded_at.tzinfo is not None:
            # Stored as naive local time, like datetime.now()
            responded_at = responded_at.astimezone().replace(tzinfo=None)
        return cls(
            conversation_id=data["conversation_id"],
            counterpart_name=data["counterpart_name"],
            responded_at=responded_at,
            inbound_content=data.get("inbound_content", ""),
            outbound_content=data.get("outbound_content", ""),
        )
