"""Turn log for the intake interview.

Turns are immutable and the log is append-only: nothing is ever edited or
removed once recorded. Helpers format the log for LLM APIs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple


class TurnRole(str, Enum):
    """Who produced a turn."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """A single message in the interview.

    Attributes:
        role: Who sent the message (user or assistant)
        content: The text content of the message
        timestamp: When the message was created
    """
    role: TurnRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(TurnRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(TurnRole.ASSISTANT, content)

    def to_dict(self) -> Dict[str, Any]:
        """Convert turn to dictionary format."""
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        """Create turn from dictionary."""
        return cls(
            role=TurnRole(data["role"]),
            content=data["content"],
            timestamp=datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.now(),
        )


def append_turn(turns: Sequence[Turn], turn: Turn) -> Tuple[Turn, ...]:
    """Return a new turn log with ``turn`` appended."""
    return tuple(turns) + (turn,)


def to_llm_format(turns: Sequence[Turn]) -> List[Dict[str, str]]:
    """Format turns for chat-completion style APIs.

    Returns:
        List of {"role": "...", "content": "..."} dicts
    """
    return [{"role": t.role.value, "content": t.content} for t in turns]
