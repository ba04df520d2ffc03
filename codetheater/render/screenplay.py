"""
codetheater.render.screenplay - Screenplay text parsing.

Splits the director's plain-text screenplay into typed elements so the
renderer can style headings, cues and dialogue differently.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel

ElementKind = Literal[
    "scene-heading", "transition", "character", "parenthetical", "dialogue", "action"
]

SCENE_HEADING_RE = re.compile(r"^(INT\.|EXT\.|INT/EXT\.)")
TRANSITION_RE = re.compile(r"^(CUT TO:|FADE TO:|DISSOLVE TO:|FADE OUT\.|FADE IN:)")
CHARACTER_RE = re.compile(r"^[A-Z][A-Z\s'.-]+$")
MAX_CHARACTER_CUE = 30


class ScreenplayElement(BaseModel):
    kind: ElementKind
    content: str
    character: str | None = None


def parse_screenplay(text: str) -> list[ScreenplayElement]:
    """Parse screenplay-formatted text into elements.

    A character cue is an upper-case line shorter than 30 characters.
    Lines after a cue are dialogue until the next blank line.

    Args:
        text: Screenplay text from the director

    Returns:
        Elements in document order
    """
    elements: list[ScreenplayElement] = []
    current_character: str | None = None
    expecting_dialogue = False

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            expecting_dialogue = False
            continue

        upper = stripped.upper()
        if SCENE_HEADING_RE.match(upper):
            elements.append(ScreenplayElement(kind="scene-heading", content=stripped))
            expecting_dialogue = False
        elif TRANSITION_RE.match(upper):
            elements.append(ScreenplayElement(kind="transition", content=stripped))
            expecting_dialogue = False
        elif CHARACTER_RE.match(stripped) and len(stripped) < MAX_CHARACTER_CUE:
            current_character = stripped
            elements.append(
                ScreenplayElement(kind="character", content=stripped, character=stripped)
            )
            expecting_dialogue = True
        elif stripped.startswith("(") and stripped.endswith(")"):
            elements.append(
                ScreenplayElement(
                    kind="parenthetical", content=stripped[1:-1], character=current_character
                )
            )
        elif expecting_dialogue:
            elements.append(
                ScreenplayElement(kind="dialogue", content=stripped, character=current_character)
            )
        else:
            elements.append(ScreenplayElement(kind="action", content=stripped))

    return elements
