"""Local transcript rendering. No model call is involved."""

from __future__ import annotations

from typing import Sequence

from ..interview.conversation_history import Turn, TurnRole

TRANSCRIPT_HEADING = "# Interview Transcript"

_SPEAKERS = {
    TurnRole.ASSISTANT: "AI",
    TurnRole.USER: "User",
}


def render_transcript(turns: Sequence[Turn]) -> str:
    """Render every turn, oldest first, as a markdown document."""
    entries = "".join(
        f"**{_SPEAKERS[turn.role]}**: {turn.content}\n\n---\n\n" for turn in turns
    )
    return f"{TRANSCRIPT_HEADING}\n\n{entries}"
