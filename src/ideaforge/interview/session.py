"""Session value passed through each orchestration step.

A Session is never mutated in place. The interview manager takes one and
returns a new one, so the whole interview can be driven (and tested)
without a UI harness.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..models import ArtifactBundle, FormSpec, GenerationStep
from .conversation_history import Turn, append_turn


class SessionStatus(str, Enum):
    INTERVIEWING = "interviewing"
    GENERATING = "generating"
    FAILED = "failed"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Session:
    """Client-held state of one intake interview."""
    turns: Tuple[Turn, ...] = ()
    pending_form: Optional[FormSpec] = None
    generation_step: Optional[GenerationStep] = None
    artifacts: Optional[ArtifactBundle] = None
    error: Optional[str] = None
    status: SessionStatus = SessionStatus.INTERVIEWING

    @property
    def is_complete(self) -> bool:
        return self.artifacts is not None

    @property
    def awaiting_generation(self) -> bool:
        """True when the interview finished but no bundle exists yet."""
        return self.status in (SessionStatus.GENERATING, SessionStatus.FAILED)

    def with_turn(self, turn: Turn) -> "Session":
        return replace(self, turns=append_turn(self.turns, turn))

    def update(self, **changes: Any) -> "Session":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turns": [t.to_dict() for t in self.turns],
            "pending_form": self.pending_form.model_dump(by_alias=True, exclude_none=True) if self.pending_form else None,
            "generation_step": self.generation_step.value if self.generation_step else None,
            "artifacts": self.artifacts.model_dump() if self.artifacts else None,
            "error": self.error,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            turns=tuple(Turn.from_dict(t) for t in data.get("turns", [])),
            pending_form=FormSpec.model_validate(data["pending_form"]) if data.get("pending_form") else None,
            generation_step=GenerationStep(data["generation_step"]) if data.get("generation_step") else None,
            artifacts=ArtifactBundle.model_validate(data["artifacts"]) if data.get("artifacts") else None,
            error=data.get("error"),
            status=SessionStatus(data.get("status", SessionStatus.INTERVIEWING.value)),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, data: str) -> "Session":
        return cls.from_dict(json.loads(data))
