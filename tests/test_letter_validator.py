"""Tests for the Letter Validation tool."""

from __future__ import annotations

import pytest

from app.models.request_models import RequestType
from app.tools.letter_validator import (
    LetterValidatorTool,
    compute_letter_metrics,
    enforce_word_count,
    normalize_letter,
    validate_letter_output,
)
from tests.conftest import _make_letter


class TestValidateLetterOutput:
    def test_well_formed_letter_passes_cleanly(self):
        result = validate_letter_output(_make_letter(), RequestType.COVER_LETTER)
        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []
        assert result.word_count == 206

    def test_too_long_is_error(self):
        result = validate_letter_output(_make_letter(sentences=40), RequestType.COVER_LETTER)
        assert result.is_valid is False
        assert result.word_count == 406
        assert result.errors == ["Letter is too long (406 words, maximum 350)"]

    def test_outreach_bounds_are_tighter(self):
        letter = _make_letter(sentences=25)  # 256 words
        assert validate_letter_output(letter, RequestType.COVER_LETTER).is_valid is True
        assert validate_letter_output(letter, RequestType.OUTREACH_MESSAGE).is_valid is False

    def test_short_letter_is_warning(self):
        result = validate_letter_output(_make_letter(sentences=10), RequestType.COVER_LETTER)
        assert result.is_valid is True
        assert any("short" in w for w in result.warnings)

    @pytest.mark.parametrize("text", ["", "   \n\t", None])
    def test_empty_letter_is_error(self, text):
        result = validate_letter_output(text)
        assert result.is_valid is False
        assert result.errors == ["Letter content is empty"]
        assert result.word_count == 0

    def test_missing_greeting_is_warning_only(self):
        result = validate_letter_output(_make_letter(greeting=""))
        assert result.is_valid is True
        assert "Letter should include a proper greeting (Dear ...)" in result.warnings

    def test_missing_closing_is_warning_only(self):
        result = validate_letter_output(_make_letter(closing="Jane Smith"))
        assert result.is_valid is True
        assert "Letter should include a professional closing" in result.warnings

    def test_markdown_is_warning_only(self):
        letter = _make_letter().replace("deep Python", "**deep Python**", 1)
        result = validate_letter_output(letter)
        assert result.is_valid is True
        assert "Letter contains markdown formatting that should be removed" in result.warnings

    def test_bullet_list_counts_as_markdown(self):
        letter = _make_letter() + "\n\n- Led the API rewrite"
        assert validate_letter_output(letter).metrics.has_markdown is True

    def test_placeholder_and_informal_words_warned(self):
        letter = _make_letter().replace("deep", "awesome", 1) + "\n\nI admire [Company]."
        result = validate_letter_output(letter)
        assert result.is_valid is True
        assert "Letter contains placeholder text: [company]" in result.warnings
        assert 'Consider replacing informal word: "awesome"' in result.warnings

    def test_missing_role_reference_warned(self):
        letter = _make_letter().replace("position", "team")
        result = validate_letter_output(letter)
        assert "Letter should reference the specific position or role" in result.warnings


class TestMetrics:
    def test_structure_counted(self):
        metrics = compute_letter_metrics(_make_letter())
        assert metrics.word_count == 206
        # greeting + 4 body paragraphs + closing
        assert metrics.paragraph_count == 6
        # 20 body sentences plus the trailing sign-off fragment
        assert metrics.sentence_count == 21
        assert metrics.has_greeting is True
        assert metrics.has_closing is True
        assert metrics.has_markdown is False

    def test_empty_text(self):
        metrics = compute_letter_metrics("")
        assert metrics.word_count == 0
        assert metrics.paragraph_count == 0


class TestNormalizeLetter:
    def test_strips_control_chars_and_blank_runs(self):
        raw = "  Dear Team,\x00\r\n\r\n\r\n\r\nBody text.\x07\n\n\n\nSincerely  "
        assert normalize_letter(raw) == "Dear Team,\n\nBody text.\n\nSincerely"

    def test_keeps_tabs_and_newlines(self):
        assert normalize_letter("a\tb\nc") == "a\tb\nc"

    def test_empty(self):
        assert normalize_letter("") == ""


class TestEnforceWordCount:
    def test_short_text_untouched(self):
        assert enforce_word_count("One two three.", 10) == "One two three."

    def test_cuts_at_late_sentence_boundary(self):
        text = "One two three four five six seven eight nine. Ten eleven twelve"
        assert enforce_word_count(text, 10) == "One two three four five six seven eight nine."

    def test_ellipsis_when_no_late_boundary(self):
        text = "One. two three four five six seven eight nine ten eleven"
        assert enforce_word_count(text, 5) == "One. two three four five..."


class TestLetterValidatorTool:
    def test_run_returns_dict(self):
        tool = LetterValidatorTool()
        result = tool._run(_make_letter(), "coverLetter")
        assert result["is_valid"] is True
        assert result["word_count"] == 206
        assert result["metrics"]["has_greeting"] is True

    @pytest.mark.asyncio
    async def test_arun_matches_run(self):
        tool = LetterValidatorTool()
        letter = _make_letter(sentences=40)
        assert await tool._arun(letter, RequestType.COVER_LETTER) == tool._run(letter, RequestType.COVER_LETTER)

    def test_check_letter_returns_model(self):
        result = LetterValidatorTool().check_letter(_make_letter(sentences=12), RequestType.OUTREACH_MESSAGE)
        assert result.is_valid is True
        assert result.word_count == 126
