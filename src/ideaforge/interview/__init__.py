"""Interview module: turn log, stage table, output parsing and sessions.

Key components:
- Turn / TurnRole: append-only conversation log entries
- Stage / StageCoordinator: the fixed offline interview sequence
- JSONExtractor: parses structured turns from model output
- Session: immutable value carried between orchestration steps

``InterviewManager`` lives in ``ideaforge.interview.interview_manager``; it
depends on the gateway and the pipeline, which in turn import from here.
"""

from .conversation_history import Turn, TurnRole
from .json_extractor import JSONExtractor
from .session import Session, SessionStatus
from .stage_coordinator import Stage, StageCoordinator, stage_for_turn_count

__all__ = [
    "Turn",
    "TurnRole",
    "JSONExtractor",
    "Session",
    "SessionStatus",
    "Stage",
    "StageCoordinator",
    "stage_for_turn_count",
]
