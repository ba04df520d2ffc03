"""
codetheater.characters - Casting contributors as screenplay characters.

Each contributor is matched to an archetype from their commit patterns.
The most active contributors become the named cast; everyone else joins
the ensemble. Casting is deterministic.
"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from codetheater.git.contributors import ContributorStats

MAX_NAMED_CHARACTERS = 10


class Archetype(BaseModel):
    key: str
    name: str
    emoji: str
    description: str
    traits: list[str]
    speech_style: str
    catchphrase: str


ARCHETYPES: dict[str, Archetype] = {
    a.key: a
    for a in (
        Archetype(
            key="ARCHITECT",
            name="The Architect",
            emoji="🏛️",
            description="Sees the big picture. Makes sweeping changes that reshape the codebase.",
            traits=["Visionary", "Bold", "Sometimes reckless", "Speaks in abstractions"],
            speech_style="Uses architectural metaphors. Talks about 'foundations' and 'structures'.",
            catchphrase="We need to think bigger.",
        ),
        Archetype(
            key="BUG_HUNTER",
            name="The Bug Hunter",
            emoji="🔍",
            description="Patient detective. Finds the bugs nobody else can see.",
            traits=["Methodical", "Skeptical", "Detail-oriented", "Quietly triumphant"],
            speech_style="Precise. Uses evidence. 'The logs show...' and 'I traced it to...'",
            catchphrase="Found it.",
        ),
        Archetype(
            key="NIGHT_OWL",
            name="The Night Owl",
            emoji="🦉",
            description="Does their best work when everyone else is asleep.",
            traits=["Mysterious", "Intense", "Coffee-dependent", "Unexpectedly poetic"],
            speech_style="Slightly dramatic. References the silence of night. Tired but wired.",
            catchphrase="The code speaks clearer at 3 AM.",
        ),
        Archetype(
            key="REFACTORER",
            name="The Refactorer",
            emoji="✨",
            description="Cannot let ugly code stand. Cleans what others leave behind.",
            traits=["Perfectionist", "Compulsive", "Principled", "Sometimes annoying"],
            speech_style="Talks about 'proper' ways. Names patterns. Sighs at legacy code.",
            catchphrase="This could be cleaner.",
        ),
        Archetype(
            key="DOCUMENTATION_HERO",
            name="The Documentation Hero",
            emoji="📚",
            description="The unsung hero who makes sure others can understand the code.",
            traits=["Patient", "Empathetic", "Long-term thinker", "Underappreciated"],
            speech_style="Explains things clearly. Asks 'what if someone new reads this?'",
            catchphrase="Future us will thank present us.",
        ),
        Archetype(
            key="PERFECTIONIST",
            name="The Perfectionist",
            emoji="💎",
            description="Small, perfect commits. Every line considered.",
            traits=["Careful", "Anxious", "High standards", "Slow but reliable"],
            speech_style="Hedges statements. 'I think...' and 'Maybe we should...'",
            catchphrase="Let me just fix this one thing first.",
        ),
        Archetype(
            key="GENERALIST",
            name="The Journeyman",
            emoji="🛤️",
            description="Versatile contributor who goes where needed.",
            traits=["Adaptable", "Reliable", "Team player", "Jack of all trades"],
            speech_style="Practical. 'Whatever works' attitude. Team-focused language.",
            catchphrase="I'll take care of it.",
        ),
    )
}


class CharacterProfile(BaseModel):
    name: str
    archetype: str
    emoji: str
    description: str
    traits: list[str]
    speech_style: str
    catchphrase: str
    commit_style: str
    commit_count: int = 0
    top_files: list[str] = []
    peak_hours: str = ""


def detect_archetype(stats: ContributorStats) -> Archetype:
    """Pick the archetype whose rule first matches the contributor's patterns."""
    p = stats.patterns
    if p.late_night_ratio > 0.4:
        return ARCHETYPES["NIGHT_OWL"]
    if p.test_file_ratio > 0.3:
        return ARCHETYPES["BUG_HUNTER"]
    if p.refactor_ratio > 0.25:
        return ARCHETYPES["REFACTORER"]
    if p.doc_file_ratio > 0.2:
        return ARCHETYPES["DOCUMENTATION_HERO"]
    if p.avg_files_per_commit > 10:
        return ARCHETYPES["ARCHITECT"]
    if p.avg_commit_size < 20:
        return ARCHETYPES["PERFECTIONIST"]
    return ARCHETYPES["GENERALIST"]


def analyze_commit_style(stats: ContributorStats) -> str:
    words = stats.common_words
    size = stats.patterns.avg_commit_size
    styles = []

    if "fix" in words or "bug" in words:
        styles.append("bug-focused")
    if "refactor" in words or "clean" in words:
        styles.append("cleanup-oriented")
    if "feat" in words or "add" in words:
        styles.append("feature-driven")
    if size < 30:
        styles.append("small atomic commits")
    if size > 200:
        styles.append("large sweeping changes")

    return ", ".join(styles) if styles else "balanced contributor"


def build_profile(stats: ContributorStats) -> CharacterProfile:
    archetype = detect_archetype(stats)
    return CharacterProfile(
        name=stats.name,
        archetype=archetype.name,
        emoji=archetype.emoji,
        description=archetype.description,
        traits=archetype.traits,
        speech_style=archetype.speech_style,
        catchphrase=archetype.catchphrase,
        commit_style=analyze_commit_style(stats),
        commit_count=stats.commit_count,
        top_files=stats.top_files,
        peak_hours=stats.peak_hours,
    )


class CharacterPool:
    """The cast for one act: named characters plus an ensemble."""

    def __init__(self, contributors: Sequence[ContributorStats]) -> None:
        ranked = sorted(contributors, key=lambda c: c.commit_count, reverse=True)
        self.profiles: dict[str, CharacterProfile] = {
            c.name: build_profile(c) for c in ranked[:MAX_NAMED_CHARACTERS]
        }
        self.ensemble: list[str] = [c.name for c in ranked[MAX_NAMED_CHARACTERS:]]

    def get_profile(self, author_name: str) -> CharacterProfile | None:
        return self.profiles.get(author_name)

    def is_named(self, author_name: str) -> bool:
        return author_name in self.profiles

    def named_characters(self) -> list[str]:
        return list(self.profiles)

    def find_profile(self, character: str) -> CharacterProfile | None:
        """Match a screenplay character cue (e.g. "ADA") to a cast profile."""
        profile = self.get_profile(character)
        if profile:
            return profile
        cue = character.lower()
        for name, candidate in self.profiles.items():
            first = name.split()[0].lower() if name.split() else ""
            if cue in name.lower() or (first and first in cue):
                return candidate
        return None
