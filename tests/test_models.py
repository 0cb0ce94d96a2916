"""Tests for ideaforge.models: forms, interview results, bundles."""

import logging

import pytest
from pydantic import ValidationError

from ideaforge.errors import FormValidationError
from ideaforge.models import (
    ArtifactBundle,
    FieldKind,
    FieldSpec,
    FormSpec,
    GenerationContext,
    GenerationStep,
    InterviewTurnResult,
)


def _form(**overrides):
    data = {
        "title": "The Basics",
        "fields": [
            {"id": "target_audience", "label": "Who is this for?", "type": "text", "required": True},
            {"id": "platform", "label": "Platform", "type": "radio", "options": ["Web", "Desktop"], "required": True},
            {"id": "features", "label": "Features", "type": "multiselect", "options": ["Payments", "AI Integration"]},
            {"id": "newsletter", "label": "Newsletter", "type": "checkbox"},
        ],
        "submitLabel": "Next",
    }
    data.update(overrides)
    return FormSpec.model_validate(data)


# --- FieldSpec / FormSpec ---

class TestFormSpec:
    def test_parses_wire_aliases(self):
        form = _form()
        assert form.submit_label == "Next"
        assert form.fields[0].kind == FieldKind.TEXT
        assert form.fields[1].options == ["Web", "Desktop"]

    def test_helper_text_uses_description_alias(self):
        field = FieldSpec.model_validate(
            {"id": "idea", "label": "Idea", "type": "textarea", "description": "One or two sentences"}
        )
        assert field.helper_text == "One or two sentences"
        assert field.required is False

    def test_dump_by_alias_round_trips(self):
        form = _form()
        again = FormSpec.model_validate(form.model_dump(by_alias=True))
        assert again == form

    def test_choice_field_without_options_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec.model_validate({"id": "platform", "label": "Platform", "type": "select"})

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate"):
            FormSpec.model_validate({
                "fields": [
                    {"id": "a", "label": "A", "type": "text"},
                    {"id": "a", "label": "A again", "type": "text"},
                ]
            })

    def test_empty_form_rejected(self):
        with pytest.raises(ValidationError):
            FormSpec.model_validate({"fields": []})

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec.model_validate({"id": "x", "label": "X", "type": "slider"})


class TestValidateAnswers:
    def test_valid_submission(self):
        _form().validate_answers({
            "target_audience": "students",
            "platform": "Web",
            "features": ["AI Integration", "Payments"],
            "newsletter": True,
        })

    def test_optional_fields_may_be_omitted(self):
        _form().validate_answers({"target_audience": "students", "platform": "Web"})

    def test_missing_required_field(self):
        with pytest.raises(FormValidationError, match="Who is this for"):
            _form().validate_answers({"platform": "Web"})

    def test_blank_required_text(self):
        with pytest.raises(FormValidationError):
            _form().validate_answers({"target_audience": "   ", "platform": "Web"})

    def test_choice_outside_options(self):
        with pytest.raises(FormValidationError, match="not a valid choice"):
            _form().validate_answers({"target_audience": "x", "platform": "Smartwatch"})

    def test_multiselect_outside_options(self):
        with pytest.raises(FormValidationError, match="Maps"):
            _form().validate_answers({"target_audience": "x", "platform": "Web", "features": ["Maps"]})

    def test_multiselect_needs_list(self):
        with pytest.raises(FormValidationError):
            _form().validate_answers({"target_audience": "x", "platform": "Web", "features": "Payments"})

    def test_checkbox_needs_bool(self):
        with pytest.raises(FormValidationError):
            _form().validate_answers({"target_audience": "x", "platform": "Web", "newsletter": "yes"})

    def test_unknown_field(self):
        with pytest.raises(FormValidationError, match="Unknown field"):
            _form().validate_answers({"target_audience": "x", "platform": "Web", "budget": "10k"})


# --- InterviewTurnResult ---

class TestInterviewTurnResult:
    def test_parses_wire_format(self):
        result = InterviewTurnResult.model_validate({
            "thought": "need the idea",
            "message": "What do you want to build?",
            "form": {"fields": [{"id": "idea", "label": "Idea", "type": "textarea", "required": True}]},
        })
        assert result.reasoning == "need the idea"
        assert result.complete is False
        assert result.form.fields[0].id == "idea"

    def test_missing_message_rejected(self):
        with pytest.raises(ValidationError):
            InterviewTurnResult.model_validate({"isComplete": False})

    def test_null_is_complete_means_not_complete(self):
        result = InterviewTurnResult.model_validate({"message": "hi", "isComplete": None})
        assert result.complete is False

    def test_complete_with_form_discards_form(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ideaforge.models"):
            result = InterviewTurnResult.model_validate({
                "message": "Done!",
                "isComplete": True,
                "form": {"fields": [{"id": "more", "label": "More?", "type": "text"}]},
            })
        assert result.complete is True
        assert result.form is None
        assert "discarding the form" in caplog.text

    def test_complete_with_invalid_form_still_completes(self):
        result = InterviewTurnResult.model_validate({"message": "done", "isComplete": True, "form": {"fields": []}})
        assert result.complete is True
        assert result.form is None

    def test_incomplete_with_invalid_form_rejected(self):
        with pytest.raises(ValidationError):
            InterviewTurnResult.model_validate({"message": "hi", "isComplete": False, "form": {"fields": []}})

    def test_to_json_uses_aliases(self):
        text = InterviewTurnResult(message="hi", complete=True).to_json()
        assert '"isComplete":true' in text
        assert "form" not in text


# --- GenerationContext / ArtifactBundle ---

class TestGenerationContext:
    def test_grows_without_mutating(self):
        empty = GenerationContext()
        with_prd = empty.with_document(GenerationStep.PRD, "prd text")
        with_design = with_prd.with_document(GenerationStep.DESIGN, "design text")

        assert empty.as_dict() == {}
        assert with_prd.as_dict() == {"prd": "prd text"}
        assert with_design.as_dict() == {"prd": "prd text", "design": "design text"}

    def test_frozen(self):
        with pytest.raises(ValidationError):
            GenerationContext().prd = "x"


class TestArtifactBundle:
    def test_save_writes_markdown_files(self, tmp_path):
        bundle = ArtifactBundle(prd="# PRD", design="# Design", tech="# Tech", transcript="# Transcript")
        written = bundle.save(tmp_path / "out")

        assert [p.name for p in written] == ["prd.md", "design.md", "tech.md", "transcript.md"]
        assert (tmp_path / "out" / "design.md").read_text(encoding="utf-8") == "# Design"

    def test_immutable(self):
        bundle = ArtifactBundle(prd="a", design="b", tech="c", transcript="d")
        with pytest.raises(ValidationError):
            bundle.prd = "changed"

    def test_json_round_trip(self):
        bundle = ArtifactBundle(prd="a", design="b", tech="c", transcript="d")
        assert ArtifactBundle.from_json(bundle.to_json()) == bundle
