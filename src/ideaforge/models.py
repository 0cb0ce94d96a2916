"""Pydantic models shared by the interview and the generation pipeline.

Field aliases follow the JSON protocol spoken with the language model
(``type``, ``description``, ``submitLabel``, ``thought``, ``isComplete``);
snake_case names are accepted as well.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import FormValidationError

logger = logging.getLogger(__name__)

AnswerValue = Union[str, bool, List[str]]


class FieldKind(str, Enum):
    """Input widget kinds a form field can ask for."""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    RADIO = "radio"
    CHECKBOX = "checkbox"

    @property
    def has_options(self) -> bool:
        return self in (FieldKind.SELECT, FieldKind.MULTISELECT, FieldKind.RADIO)


class FieldSpec(BaseModel):
    """A single question inside a form."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    label: str
    kind: FieldKind = Field(alias="type")
    options: List[str] = Field(default_factory=list)
    placeholder: Optional[str] = None
    required: bool = False
    helper_text: Optional[str] = Field(default=None, alias="description")

    @model_validator(mode="after")
    def _check_options(self) -> "FieldSpec":
        if self.kind.has_options and not self.options:
            raise ValueError(f"field '{self.id}' of type {self.kind.value} needs options")
        return self

    def validate_answer(self, value: Optional[AnswerValue]) -> None:
        """Raise FormValidationError if ``value`` is not acceptable for this field."""
        if _is_blank(value):
            if self.required:
                raise FormValidationError(f"'{self.label}' is required")
            return

        if self.kind == FieldKind.CHECKBOX:
            if not isinstance(value, bool):
                raise FormValidationError(f"'{self.label}' must be checked or unchecked")
            if self.required and not value:
                raise FormValidationError(f"'{self.label}' must be checked")
        elif self.kind == FieldKind.MULTISELECT:
            if not isinstance(value, list):
                raise FormValidationError(f"'{self.label}' expects a list of choices")
            unknown = [v for v in value if v not in self.options]
            if unknown:
                raise FormValidationError(f"'{self.label}' has invalid choices: {', '.join(unknown)}")
        elif not isinstance(value, str):
            raise FormValidationError(f"'{self.label}' expects text")
        elif self.kind.has_options and value not in self.options:
            raise FormValidationError(f"'{value}' is not a valid choice for '{self.label}'")


class FormSpec(BaseModel):
    """A set of questions rendered and submitted together."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    fields: List[FieldSpec] = Field(min_length=1)
    submit_label: Optional[str] = Field(default=None, alias="submitLabel")

    @field_validator("fields")
    @classmethod
    def _unique_ids(cls, fields: List[FieldSpec]) -> List[FieldSpec]:
        seen = set()
        for f in fields:
            if f.id in seen:
                raise ValueError(f"duplicate field id '{f.id}'")
            seen.add(f.id)
        return fields

    def get_field(self, field_id: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def validate_answers(self, answers: Mapping[str, AnswerValue]) -> None:
        """Check a submission against this form.

        Raises:
            FormValidationError: On unknown field ids, missing required
                answers or values outside a field's options.
        """
        unknown = [key for key in answers if self.get_field(key) is None]
        if unknown:
            raise FormValidationError(f"Unknown field(s): {', '.join(unknown)}")

        for f in self.fields:
            f.validate_answer(answers.get(f.id))


class InterviewTurnResult(BaseModel):
    """What the interviewer says next, and optionally the form to show."""

    model_config = ConfigDict(populate_by_name=True)

    reasoning: Optional[str] = Field(default=None, alias="thought")
    message: str
    form: Optional[FormSpec] = None
    complete: bool = Field(default=False, alias="isComplete")

    @field_validator("complete", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _drop_form_when_complete(cls, data: Any) -> Any:
        # Completion wins even when the form attached to it would not validate
        if not isinstance(data, dict) or data.get("form") is None:
            return data
        flag = data.get("isComplete", data.get("complete"))
        if isinstance(flag, str):
            flag = flag.strip().lower() in ("true", "1", "yes")
        if flag:
            logger.warning("Interview result is complete but carries a form; discarding the form")
            data = {key: value for key, value in data.items() if key != "form"}
        return data

    @model_validator(mode="after")
    def _complete_has_no_form(self) -> "InterviewTurnResult":
        if self.complete and self.form is not None:
            logger.warning("Interview result is complete but carries a form; discarding the form")
            self.form = None
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> "InterviewTurnResult":
        return cls.model_validate_json(data)


class GenerationStep(str, Enum):
    """Document generation stages, in the order they run."""
    PRD = "prd"
    DESIGN = "design"
    TECH = "tech"

    @property
    def display_name(self) -> str:
        return {
            GenerationStep.PRD: "Product Requirements Document",
            GenerationStep.DESIGN: "Design Guide",
            GenerationStep.TECH: "Technical Specifications",
        }[self]


class GenerationContext(BaseModel):
    """Documents produced earlier in the same generation run."""

    model_config = ConfigDict(frozen=True)

    prd: Optional[str] = None
    design: Optional[str] = None

    def with_document(self, step: GenerationStep, text: str) -> "GenerationContext":
        """Return a new context that also carries ``text`` for ``step``."""
        if step == GenerationStep.TECH:
            return self
        return self.model_copy(update={step.value: text})

    def as_dict(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)


class ArtifactBundle(BaseModel):
    """The finished package: three generated documents and the transcript."""

    model_config = ConfigDict(frozen=True)

    prd: str
    design: str
    tech: str
    transcript: str

    FILE_NAMES: ClassVar[Dict[str, str]] = {
        "prd": "prd.md",
        "design": "design.md",
        "tech": "tech.md",
        "transcript": "transcript.md",
    }

    def save(self, directory: Path) -> List[Path]:
        """Write each artifact as a markdown file into ``directory``."""
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for attr, name in self.FILE_NAMES.items():
            path = directory / name
            path.write_text(getattr(self, attr), encoding="utf-8")
            written.append(path)
        return written

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, data: str) -> "ArtifactBundle":
        return cls.model_validate_json(data)


def _is_blank(value: Optional[AnswerValue]) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False
