"""Document generation stages run once the interview completes."""

from .generation_pipeline import GenerationPipeline
from .transcript import render_transcript

__all__ = [
    "GenerationPipeline",
    "render_transcript",
]
