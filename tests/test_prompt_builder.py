"""
Tests for redesign prompt construction.
"""
import pytest

from redesigner.core.types import StyleParameters
from redesigner.prompting.prompt_builder import (
    LAYOUT_DIRECTIVE,
    OUTPUT_DIRECTIVE,
    build_redesign_prompt,
    resolve_prompt,
)


class TestBuildRedesignPrompt:
    """Clause content and ordering."""

    def test_mentions_all_inputs_in_fixed_order(self, full_params):
        prompt = build_redesign_prompt(full_params)

        positions = [
            prompt.index("living room"),
            prompt.index("Modern"),
            prompt.index("length 5 m"),
            prompt.index("width 4 m"),
            prompt.index("height 3 m"),
            prompt.index("mid"),
            prompt.index("add a reading nook"),
            prompt.index(OUTPUT_DIRECTIVE),
        ]
        assert positions == sorted(positions)
        assert prompt.startswith("Redesign this living room in Modern style.")
        assert prompt.endswith(OUTPUT_DIRECTIVE)

    def test_layout_directive_follows_lead(self, full_params):
        prompt = build_redesign_prompt(full_params)
        assert prompt.index(LAYOUT_DIRECTIVE) < prompt.index("Room dimensions")

    def test_deterministic(self, full_params):
        copy = StyleParameters(**full_params.present())
        assert build_redesign_prompt(full_params) == build_redesign_prompt(copy)

    def test_empty_parameters_leave_no_artifacts(self):
        prompt = build_redesign_prompt(StyleParameters())

        assert prompt == f"Redesign this room. {LAYOUT_DIRECTIVE} {OUTPUT_DIRECTIVE}"
        for artifact in ("None", "undefined", "..", " ,", "  "):
            assert artifact not in prompt

    def test_partial_dimensions_are_skipped(self):
        prompt = build_redesign_prompt(StyleParameters(length="5", width="4"))
        assert "dimensions" not in prompt.lower()

    def test_omitted_wishes_and_budget(self):
        prompt = build_redesign_prompt(StyleParameters(style="Scandinavian", room_type="bedroom"))

        assert "Budget" not in prompt
        assert "wishes" not in prompt
        assert "Scandinavian" in prompt and "bedroom" in prompt

    @pytest.mark.parametrize("wishes", ["more plants.", "more plants", "  more plants!  "])
    def test_wishes_punctuation_is_normalized(self, wishes):
        prompt = build_redesign_prompt(StyleParameters(wishes=wishes))
        assert "Additional wishes: more plants. " in prompt

    def test_blank_fields_are_treated_as_absent(self):
        params = StyleParameters(style="  ", budget="", wishes="   ")
        assert build_redesign_prompt(params) == build_redesign_prompt(StyleParameters())


class TestResolvePrompt:

    def test_explicit_prompt_wins(self, full_params):
        params = StyleParameters(prompt="  a cozy loft  ", style="Modern")
        assert resolve_prompt(params) == "a cozy loft"

    def test_template_without_explicit_prompt(self, full_params):
        assert resolve_prompt(full_params) == build_redesign_prompt(full_params)
