"""IdeaForge: turn a product idea into a PRD, design guide and tech spec."""

from .config import Config, GatewayConfig, load_config
from .gateway import Gateway, LLMGateway, OfflineGateway, build_gateway
from .models import ArtifactBundle, FieldKind, FieldSpec, FormSpec, GenerationStep, InterviewTurnResult
from .pipeline import GenerationPipeline
from .interview import Session, SessionStatus, Stage, Turn
from .interview.interview_manager import InterviewManager

__version__ = "0.1.0"

__all__ = [
    "ArtifactBundle",
    "Config",
    "FieldKind",
    "FieldSpec",
    "FormSpec",
    "Gateway",
    "GatewayConfig",
    "GenerationPipeline",
    "GenerationStep",
    "InterviewManager",
    "InterviewTurnResult",
    "LLMGateway",
    "OfflineGateway",
    "Session",
    "SessionStatus",
    "Stage",
    "Turn",
    "build_gateway",
    "load_config",
]
