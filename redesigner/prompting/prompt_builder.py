"""Prompt assembly for room redesign requests.

This module only renders styling fields into an instruction string for the
image provider. Input parsing, provider selection, and transport happen
outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed clause order.
    - No hidden side effects (no I/O, no global state mutation).
    - Omitted fields leave no trace in the output (no `None`, no stray
      punctuation).

Prompt safety model:
    Free-text fields (`wishes`, `style`, `budget`) are interpolated as raw
    strings. The provider is the only consumer of the prompt.
"""

from redesigner.core.types import StyleParameters


# =========================================================
# FIXED CLAUSES
# =========================================================

LAYOUT_DIRECTIVE = (
    "Keep the layout and structure of the room: walls, windows, doors and "
    "camera angle stay where they are. Change the finishes, furniture and "
    "lighting to match the style."
)

OUTPUT_DIRECTIVE = "Output a single photorealistic interior render."

DEFAULT_ROOM = "room"


def _sentence(text: str) -> str:
    """Trim trailing punctuation/whitespace and close with a single period."""
    return text.strip().rstrip(".!;,").rstrip() + "."


# =========================================================
# REDESIGN PROMPT
# =========================================================
# Clause order:
#   1) Room/style instruction
#   2) Layout-preservation directive
#   3) Dimensions (only when length, width and height are all present)
#   4) Budget
#   5) Wishes
#   6) Output directive

def build_redesign_prompt(params: StyleParameters) -> str:
    """Render styling fields into a single provider instruction.

    Args:
        params: Normalized styling fields. All fields are optional.

    Returns:
        Prompt string with clauses in fixed order, separated by single spaces.

    Edge cases:
        - Missing room type falls back to "room".
        - Missing style drops the "in ... style" fragment.
        - Dimensions are skipped unless all three are present.
    """
    room = params.room_type or DEFAULT_ROOM
    if params.style:
        lead = f"Redesign this {room} in {params.style} style."
    else:
        lead = f"Redesign this {room}."

    clauses = [lead, LAYOUT_DIRECTIVE]

    if params.has_dimensions:
        clauses.append(
            f"Room dimensions: length {params.length} m, "
            f"width {params.width} m, height {params.height} m."
        )

    if params.budget:
        clauses.append(_sentence(f"Budget level: {params.budget}"))

    if params.wishes:
        clauses.append(_sentence(f"Additional wishes: {params.wishes}"))

    clauses.append(OUTPUT_DIRECTIVE)

    return " ".join(clauses)


def resolve_prompt(params: StyleParameters) -> str:
    """Return the caller's explicit `prompt` if given, else the rendered template."""
    if params.prompt:
        return params.prompt
    return build_redesign_prompt(params)
