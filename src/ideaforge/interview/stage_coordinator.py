"""Stage coordination for the intake interview.

The offline interview walks a fixed sequence of stages. Which stage comes
next depends only on how many turns have been exchanged, so the transition
is a pure function that can be tested on its own.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Sequence

from ..models import FieldKind, FieldSpec, FormSpec, InterviewTurnResult
from .conversation_history import Turn


class Stage(str, Enum):
    """Interview stages.

    - SPARK: Ask what the user wants to build
    - BASICS: Audience, platform and monetization
    - DESIGN_PREFS: Visual style and primary color
    - TECH_PREFS: Expected scale and key technical features
    - COMPLETE: Hand off to document generation
    """
    SPARK = "spark"
    BASICS = "basics"
    DESIGN_PREFS = "design-preferences"
    TECH_PREFS = "tech-preferences"
    COMPLETE = "complete"

    @property
    def display_name(self) -> str:
        """Human-readable stage name."""
        return {
            Stage.SPARK: "The Spark",
            Stage.BASICS: "The Basics",
            Stage.DESIGN_PREFS: "Design Vibes",
            Stage.TECH_PREFS: "Under the Hood",
            Stage.COMPLETE: "Complete",
        }[self]

    @property
    def next_stage(self) -> Optional["Stage"]:
        """Get the next stage in the interview."""
        order = list(Stage)
        idx = order.index(self)
        if idx < len(order) - 1:
            return order[idx + 1]
        return None


def stage_for_turn_count(count: int) -> Stage:
    """Map the number of exchanged turns to the stage to present."""
    if count < 0:
        raise ValueError(f"turn count cannot be negative: {count}")
    if count == 0:
        return Stage.SPARK
    if count <= 2:
        return Stage.BASICS
    if count <= 4:
        return Stage.DESIGN_PREFS
    if count <= 6:
        return Stage.TECH_PREFS
    return Stage.COMPLETE


def _field(id: str, label: str, kind: FieldKind, **kwargs) -> FieldSpec:
    return FieldSpec(id=id, label=label, kind=kind, **kwargs)


_STAGE_RESULTS: Dict[Stage, InterviewTurnResult] = {
    Stage.SPARK: InterviewTurnResult(
        reasoning="Starting the interview. Need to know the core idea.",
        message=(
            "Hello! I'm your AI Product Co-founder. I'm here to help you turn your idea into reality. "
            "To get started, tell me: What do you want to build today?"
        ),
        form=FormSpec(
            title="The Spark",
            fields=[
                _field("idea", "Describe your app idea", FieldKind.TEXTAREA,
                       placeholder="e.g., A Tinder for adopting pets...", required=True),
            ],
            submit_label="Let's Go",
        ),
    ),
    Stage.BASICS: InterviewTurnResult(
        reasoning="User provided idea. Now need to define the audience and platform.",
        message="That sounds interesting! Let's pin down the basics.",
        form=FormSpec(
            title="The Basics",
            fields=[
                _field("target_audience", "Who is this for?", FieldKind.TEXT,
                       placeholder="e.g., Busy professionals, Students...", required=True),
                _field("platform", "Primary Platform", FieldKind.RADIO,
                       options=["Web", "Mobile (iOS/Android)", "Desktop", "Cross-platform"], required=True),
                _field("monetization", "How will it make money?", FieldKind.SELECT,
                       options=["Free", "Subscription", "Ads", "One-time purchase"], required=False),
            ],
            submit_label="Next: Design",
        ),
    ),
    Stage.DESIGN_PREFS: InterviewTurnResult(
        reasoning="Basics done. Now asking about design preferences.",
        message="Got it. Now let's talk about the look and feel.",
        form=FormSpec(
            title="Design Vibes",
            fields=[
                _field("style", "Visual Style", FieldKind.SELECT,
                       options=["Minimalist", "Playful/Cartoon", "Corporate/Professional", "Dark/Futuristic"],
                       required=True),
                _field("colors", "Primary Color Preference", FieldKind.RADIO,
                       options=["Blue", "Green", "Purple", "Black/White"], required=True),
            ],
            submit_label="Next: Tech",
        ),
    ),
    Stage.TECH_PREFS: InterviewTurnResult(
        reasoning="Design done. Now technical details.",
        message="Okay, last step before I generate the specs. Let's get technical.",
        form=FormSpec(
            title="Under the Hood",
            fields=[
                _field("users", "Expected User Scale (Year 1)", FieldKind.SELECT,
                       options=["< 1,000", "1,000 - 10,000", "10,000 - 1M", "1M+"], required=True),
                _field("features", "Key Technical Features", FieldKind.MULTISELECT,
                       options=["Real-time Chat", "Payments", "AI Integration", "Video Streaming", "Maps/Location"],
                       required=False),
            ],
            submit_label="Generate Specs",
        ),
    ),
    Stage.COMPLETE: InterviewTurnResult(
        reasoning="All info gathered. Signaling completion.",
        message="I have everything I need! Generating your complete product package now...",
        complete=True,
    ),
}


class StageCoordinator:
    """Produces the canned interview turn for each stage.

    Example:
        coordinator = StageCoordinator()
        result = coordinator.next_turn([])   # spark form
    """

    def result_for(self, stage: Stage) -> InterviewTurnResult:
        """Return a fresh copy of the canned result for ``stage``."""
        return _STAGE_RESULTS[stage].model_copy(deep=True)

    def next_turn(self, turns: Sequence[Turn]) -> InterviewTurnResult:
        return self.result_for(stage_for_turn_count(len(turns)))
