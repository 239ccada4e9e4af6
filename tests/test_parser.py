"""
Tests pour la validation des réponses structurées et les prompts.
"""

import json

import pytest

from epub_llm_translator.exceptions import GenerationContractViolation
from epub_llm_translator.translation import (
    RESPONSE_SCHEMA_NAME,
    Language,
    TemplateRenderer,
    build_response_format,
    parse_translation_response,
)
from epub_llm_translator.translation.result import ResultCountMismatch, TranslationResult


class TestParseTranslationResponse:
    def test_valid_response(self):
        content = json.dumps({"translation_paragraphs": ["Un", "Deux"]})

        assert parse_translation_response(content) == ["Un", "Deux"]

    def test_empty_array_is_valid(self):
        assert parse_translation_response('{"translation_paragraphs": []}') == []

    @pytest.mark.parametrize(
        "content",
        [
            "Pas du JSON",
            '{"paragraphs": ["Un"]}',
            '{"translation_paragraphs": "Un"}',
            '{"translation_paragraphs": [1, 2]}',
            '{"translation_paragraphs": ["Un"], "extra": true}',
            '["Un", "Deux"]',
        ],
    )
    def test_schema_violations(self, content):
        with pytest.raises(GenerationContractViolation) as exc_info:
            parse_translation_response(content)

        assert exc_info.value.raw_content == content

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_content(self, content):
        with pytest.raises(GenerationContractViolation):
            parse_translation_response(content)

    def test_refusal(self):
        with pytest.raises(GenerationContractViolation, match="refusé"):
            parse_translation_response(None, refusal="I can't help with that")

    def test_violation_location_in_message(self):
        error = GenerationContractViolation("❌ Réponse invalide")
        error.document_path = "OEBPS/chap1.xhtml"
        error.chunk_index = 2

        assert "OEBPS/chap1.xhtml, chunk 2" in str(error)


class TestResponseFormat:
    def test_strict_json_schema(self):
        response_format = build_response_format()

        assert response_format["type"] == "json_schema"
        assert response_format["json_schema"]["name"] == RESPONSE_SCHEMA_NAME
        assert response_format["json_schema"]["strict"] is True

        schema = response_format["json_schema"]["schema"]
        assert schema["required"] == ["translation_paragraphs"]
        assert schema["additionalProperties"] is False
        assert schema["properties"]["translation_paragraphs"]["items"]["type"] == "string"


class TestTranslationResult:
    def test_positional_access(self):
        result = TranslationResult(("Un",), expected_count=2)

        assert result.get(0) == "Un"
        assert result.get(1) == ""
        assert result.get(-1) == ""
        assert result.is_count_mismatch
        assert result.received_count == 1

    def test_matching_count(self):
        result = TranslationResult(("Un", "Deux"), expected_count=2)

        assert not result.is_count_mismatch
        assert len(result) == 2

    def test_mismatch_note_message(self):
        note = ResultCountMismatch("OEBPS/c.xhtml", 0, expected=3, received=2)

        assert "OEBPS/c.xhtml" in str(note)
        assert "2 traduction(s)" in str(note)


class TestTemplateRenderer:
    def test_system_prompt(self):
        assert TemplateRenderer().render_system() == "You are a book translator."

    def test_context_absent_without_neighbours(self):
        assert TemplateRenderer().render_context(None, "") is None

    def test_context_contains_neighbours(self):
        prompt = TemplateRenderer().render_context("Before text", "After text")

        assert "Before text" in prompt
        assert "After text" in prompt
        assert "Do NOT translate" in prompt

    def test_context_with_only_preceding(self):
        prompt = TemplateRenderer().render_context("Before text", None)

        assert "Before text" in prompt
        assert "Following text" not in prompt

    def test_translate_prompt(self):
        prompt = TemplateRenderer().render_translate(
            content="One\n\nTwo",
            count=2,
            language_instruction=Language.FRENCH.instruction,
        )

        assert "One\n\nTwo" in prompt
        assert "exactly 2 entries" in prompt
        assert prompt.endswith("Translate this text into French")

    def test_translate_prompt_singular(self):
        prompt = TemplateRenderer().render_translate(
            content="One", count=1, language_instruction="Translate this text into German"
        )

        assert "exactly 1 entry" in prompt

    def test_custom_prompt_dir(self, tmp_path):
        for name in ("system.jinja", "context.jinja", "translate.jinja"):
            (tmp_path / name).write_text("custom {{ count | default('') }}", encoding="utf-8")

        renderer = TemplateRenderer(tmp_path)

        assert renderer.render_system() == "custom"
