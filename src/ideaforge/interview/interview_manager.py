"""Interview manager: drives a Session through the interview and generation.

Every public operation takes a Session and returns a new one. Gateway and
generation failures are recovered here and turned into a user-facing
message on the returned session; details go to the log.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import FormValidationError, GatewayError, GenerationError, SessionBusyError, SessionStateError
from ..gateway import FormData, Gateway
from ..models import GenerationStep
from ..pipeline import GenerationPipeline
from .conversation_history import Turn
from .session import Session, SessionStatus
from .stage_coordinator import stage_for_turn_count

logger = logging.getLogger(__name__)

# Field id used when the user types instead of filling a form
FREE_TEXT_FIELD = "message"
ANSWER_LIST_SEPARATOR = ", "


def format_answers(answers: FormData) -> str:
    """Render a form submission as the text of a user turn.

    One ``id: value`` line per answered field, in submission order. Lists
    are joined with ``", "`` in the order they were selected.
    """
    lines = []
    for key, value in answers.items():
        if isinstance(value, list):
            value = ANSWER_LIST_SEPARATOR.join(value)
        elif isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


def _drop_unanswered(answers: Mapping[str, Any]) -> Dict[str, Any]:
    """Omit fields the user left empty."""
    cleaned = {}
    for key, value in answers.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = list(value)
        cleaned[key] = value
    return cleaned


class InterviewManager:
    """Main orchestrator for the intake interview.

    Example:
        manager = InterviewManager(OfflineGateway())
        session = await manager.start()
        session = await manager.submit_form(session, {"idea": "pet adoption app"})
        ...
        if session.is_complete:
            session.artifacts.save(Path("out"))
    """

    INTERVIEW_ERROR = "Sorry, I encountered an error. Please try again."
    GENERATION_ERROR = "Sorry, I failed to generate the documents. Please try again."

    def __init__(self, gateway: Gateway, pipeline: Optional[GenerationPipeline] = None):
        self.gateway = gateway
        self.pipeline = pipeline or GenerationPipeline(gateway)
        self._busy = False
        self._generating: Optional[Session] = None
        self._on_progress: Optional[Callable[[Session], None]] = None

        # A callback already set on an injected pipeline still fires, before ours
        self._pipeline_progress = self.pipeline.on_progress
        self.pipeline.set_on_progress(self._handle_generation_step)

    @property
    def busy(self) -> bool:
        return self._busy

    def set_on_progress(self, callback: Callable[[Session], None]) -> None:
        """Set callback receiving a session snapshot as each generation stage starts."""
        self._on_progress = callback

    @asynccontextmanager
    async def _trigger(self):
        if self._busy:
            raise SessionBusyError("A request is already in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _ensure_interviewing(self, session: Session) -> None:
        if session.is_complete:
            raise SessionStateError("The package has been generated; reset to start over")
        if session.awaiting_generation:
            raise SessionStateError("The interview is finished; retry generation instead")

    def reset(self) -> Session:
        """Start over with an empty session."""
        return Session()

    async def start(self, session: Optional[Session] = None) -> Session:
        """Ask the opening question.

        Returns:
            Session holding the greeting turn and the first form
        """
        session = session or Session()
        if session.turns:
            raise SessionStateError("The interview has already started")

        async with self._trigger():
            return await self._advance(session, session, None)

    async def submit_form(self, session: Session, answers: Mapping[str, Any]) -> Session:
        """Submit answers to the pending form and advance the interview."""
        self._ensure_interviewing(session)
        if session.pending_form is None:
            raise SessionStateError("No form is pending; send a text message instead")

        answers = _drop_unanswered(answers)
        try:
            session.pending_form.validate_answers(answers)
        except FormValidationError as exc:
            return session.update(error=str(exc))

        async with self._trigger():
            return await self._submit(session, answers)

    async def submit_text(self, session: Session, text: str) -> Session:
        """Free-text reply, used when no form is pending.

        Treated exactly like a single-field form submission.
        """
        self._ensure_interviewing(session)
        if session.pending_form is not None:
            raise SessionStateError("A form is pending; submit the form instead")
        if not text or not text.strip():
            return session.update(error="Please type a message.")

        async with self._trigger():
            return await self._submit(session, {FREE_TEXT_FIELD: text.strip()})

    async def retry_generation(self, session: Session) -> Session:
        """Run document generation again after a failure."""
        if session.status != SessionStatus.FAILED:
            raise SessionStateError("Generation can only be retried after it failed")

        async with self._trigger():
            return await self._generate(session.update(status=SessionStatus.GENERATING, error=None))

    async def _submit(self, session: Session, answers: FormData) -> Session:
        updated = session.with_turn(Turn.user(format_answers(answers))).update(pending_form=None, error=None)
        return await self._advance(session, updated, answers)

    async def _advance(self, previous: Session, session: Session, form_data: Optional[FormData]) -> Session:
        """Ask the gateway for the next turn.

        On failure, ``previous`` is returned with an error message so no
        partial turn is recorded.
        """
        try:
            result = await self.gateway.next_turn(session.turns, form_data)
        except GatewayError as exc:
            logger.error("Interview turn failed: %s", exc)
            return previous.update(error=self.INTERVIEW_ERROR)
        except Exception:
            logger.exception("Unexpected error from gateway during interview turn")
            return previous.update(error=self.INTERVIEW_ERROR)

        if result.message:
            session = session.with_turn(Turn.assistant(result.message))

        if result.complete:
            logger.info("Interview complete after %d turns", len(session.turns))
            return await self._generate(
                session.update(pending_form=None, status=SessionStatus.GENERATING, error=None)
            )

        return session.update(pending_form=result.form, error=None)

    async def _generate(self, session: Session) -> Session:
        self._generating = session
        try:
            bundle = await self.pipeline.run(session.turns)
        except GenerationError as exc:
            logger.error("Package generation aborted: %s", exc)
            return session.update(status=SessionStatus.FAILED, generation_step=None, error=self.GENERATION_ERROR)
        finally:
            self._generating = None

        return session.update(artifacts=bundle, status=SessionStatus.COMPLETE, generation_step=None, error=None)

    def _handle_generation_step(self, step: GenerationStep) -> None:
        if self._pipeline_progress:
            self._pipeline_progress(step)
        if self._generating is None:
            return
        self._generating = self._generating.update(generation_step=step)
        if self._on_progress:
            self._on_progress(self._generating)

    def get_progress(self, session: Session) -> Dict[str, Any]:
        """Get progress information for a session.

        The stage is the one whose form is on screen, chosen before the
        latest assistant turn was appended.
        """
        stage = stage_for_turn_count(max(len(session.turns) - 1, 0))
        return {
            "stage": stage.value,
            "stage_name": stage.display_name,
            "next_stage": stage.next_stage.value if stage.next_stage else None,
            "turns": len(session.turns),
            "status": session.status.value,
            "generation_step": session.generation_step.value if session.generation_step else None,
            "is_complete": session.is_complete,
        }
