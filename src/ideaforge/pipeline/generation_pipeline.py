"""Three-stage document generation: PRD, then Design, then Tech.

Each stage reads the documents produced before it in the same run, so the
stages are awaited strictly one after another.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..errors import GenerationError
from ..gateway import Gateway
from ..interview.conversation_history import Turn
from ..models import ArtifactBundle, GenerationContext, GenerationStep
from .transcript import render_transcript

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationStep], None]


class GenerationPipeline:
    """Generate the product package from a finished interview.

    Example:
        pipeline = GenerationPipeline(gateway)
        bundle = await pipeline.run(session.turns)
    """

    STEPS = (GenerationStep.PRD, GenerationStep.DESIGN, GenerationStep.TECH)

    def __init__(self, gateway: Gateway, on_progress: Optional[ProgressCallback] = None):
        self.gateway = gateway
        self._on_progress = on_progress

    @property
    def on_progress(self) -> Optional[ProgressCallback]:
        return self._on_progress

    def set_on_progress(self, callback: Optional[ProgressCallback]) -> None:
        """Set callback invoked before each stage starts."""
        self._on_progress = callback

    def _notify_progress(self, step: GenerationStep) -> None:
        if self._on_progress:
            self._on_progress(step)

    async def run(self, turns: Sequence[Turn]) -> ArtifactBundle:
        """Run all stages and assemble the bundle.

        Raises:
            GenerationError: If any stage fails. Later stages are not run
                and no bundle is produced.
        """
        turns = tuple(turns)
        context = GenerationContext()
        documents = {}

        for step in self.STEPS:
            self._notify_progress(step)
            logger.info("Generating %s...", step.display_name)
            try:
                text = await self.gateway.generate_section(turns, step, context)
            except Exception as exc:
                logger.error("%s generation failed: %s", step.display_name, exc)
                raise GenerationError(step.value) from exc

            documents[step] = text
            context = context.with_document(step, text)

        return ArtifactBundle(
            prd=documents[GenerationStep.PRD],
            design=documents[GenerationStep.DESIGN],
            tech=documents[GenerationStep.TECH],
            transcript=render_transcript(turns),
        )
