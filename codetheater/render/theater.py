"""
codetheater.render.theater - Rich terminal renderer for the screenplay.

Draws the title card, scene text, montages, pivotal banners and act
breaks, plus the tables used by the ``releases`` and ``characters``
commands. When the console records, the whole performance can be
exported as plain text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich import box
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from codetheater.characters import CharacterPool, CharacterProfile
from codetheater.exceptions import CodeTheaterError
from codetheater.io import write_text
from codetheater.models import Commit, Tag
from codetheater.render.screenplay import parse_screenplay
from codetheater.utils import format_date, to_roman, truncate

MONTAGE_LIMIT = 8
BUBBLE_WIDTH = 64


class TheaterRenderer:
    """Renders screenplay output to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_title(self, title: str, subtitle: str | None = None) -> None:
        body = Text(title.upper(), style="bold yellow", justify="center")
        if subtitle:
            body.append(f"\n{subtitle}", style="dim")
        self.console.print()
        self.console.print(Panel(body, box=box.DOUBLE, border_style="cyan", padding=(1, 2)))
        self.console.print()

    def render_previously_on(self, key_events: Sequence[str]) -> None:
        """Show the last few key events of the stored narrative."""
        self.console.print(Rule(style="dim"))
        self.console.print("[bold italic]  Previously on CODE THEATER...[/bold italic]\n")
        for event in list(key_events)[-3:]:
            self.console.print(f'[dim]    "{event}"[/dim]')
        self.console.print()
        self.console.print(Rule(style="dim"))

    def render_screenplay(self, text: str, cast: CharacterPool | None = None) -> None:
        """Render director output: framed headings, cues and dialogue bubbles.

        Args:
            text: Screenplay text
            cast: Optional cast used to decorate character cues with emoji
        """
        bubble: list[str] = []

        def flush() -> None:
            if bubble:
                self._speech_bubble(" ".join(bubble))
                bubble.clear()

        for element in parse_screenplay(text):
            if element.kind != "dialogue":
                flush()

            if element.kind == "scene-heading":
                self.console.print()
                self.console.print(
                    Panel(
                        Text(element.content, style="bold yellow"),
                        box=box.HEAVY,
                        border_style="yellow",
                    )
                )
            elif element.kind == "transition":
                self.console.print(Align.right(Text(element.content, style="italic")))
            elif element.kind == "character":
                self._character_cue(element.content, cast)
            elif element.kind == "parenthetical":
                self.console.print(f"    [dim]({element.content})[/dim]")
            elif element.kind == "dialogue":
                bubble.append(element.content)
            else:
                self.console.print(f"  {element.content}", highlight=False)

        flush()

    def _character_cue(self, cue: str, cast: CharacterPool | None) -> None:
        profile = cast.find_profile(cue) if cast else None
        emoji = f"{profile.emoji} " if profile else ""
        self.console.print()
        self.console.print(f"  {emoji}[bold cyan]{cue}[/bold cyan]")

    def _speech_bubble(self, text: str) -> None:
        width = min(BUBBLE_WIDTH, max(len(text) + 6, 12))
        self.console.print(
            Panel(text, box=box.ROUNDED, width=width, padding=(0, 1)),
            highlight=False,
        )

    def render_montage(self, title: str, commits: Sequence[Commit], narration: str = "") -> None:
        """Montage panel listing up to eight commits, then the narration."""
        table = Table(box=None, show_header=False, padding=(0, 1))
        table.add_column("SHA", style="dim")
        table.add_column("Message")
        table.add_column("Author", style="cyan")
        for commit in commits[:MONTAGE_LIMIT]:
            table.add_row(commit.short_sha, truncate(commit.message, 50), commit.author.name)
        if len(commits) > MONTAGE_LIMIT:
            table.add_row("", f"[dim]... {len(commits) - MONTAGE_LIMIT} more[/dim]", "")

        self.console.print()
        self.console.print(
            Panel(
                table,
                title=f"[bold]♪ MONTAGE: {title.upper()} ♪[/bold]",
                subtitle=f"[dim]{len(commits)} commits[/dim]",
                border_style="magenta",
            )
        )
        if narration.strip():
            self.render_screenplay(narration)

    def render_pivotal_banner(self) -> None:
        self.console.print()
        self.console.print(Align.center(Text("▼ PIVOTAL MOMENT ▼", style="bold yellow")))

    def render_act_break(self, act_number: int, teaser: str = "") -> None:
        body = Text(
            f"🎭  E N D   O F   A C T   {to_roman(act_number)}  🎭",
            style="bold",
            justify="center",
        )
        teaser = " ".join(teaser.replace('"', " ").split())
        if teaser:
            body.append(f'\n\n"{truncate(teaser, 80)}"', style="italic")
        self.console.print()
        self.console.print(Panel(body, box=box.HEAVY, border_style="dim", padding=(1, 2)))
        self.console.print()

    def render_releases(self, tags: Sequence[Tag], counts: dict[str, int]) -> None:
        if not tags:
            self.console.print("[yellow]No releases found.[/yellow]")
            return

        table = Table(title="Releases")
        table.add_column("Tag", style="cyan")
        table.add_column("Date", style="green")
        table.add_column("Commits", justify="right")
        table.add_column("Message", style="dim")
        for tag in tags:
            table.add_row(
                tag.name,
                format_date(tag.date),
                str(counts.get(tag.name, 0)),
                truncate(tag.message or "", 50),
            )
        self.console.print(table)

    def render_character_cards(self, cast: CharacterPool) -> None:
        for profile in cast.profiles.values():
            self.console.print(self._character_card(profile))
        if cast.ensemble:
            self.console.print(f"[dim]Ensemble: {', '.join(cast.ensemble)}[/dim]")

    @staticmethod
    def _character_card(profile: CharacterProfile) -> Panel:
        body = Text()
        body.append(f"{profile.emoji} {profile.archetype}\n", style="bold")
        body.append(f"{profile.description}\n\n")
        for trait in profile.traits[:3]:
            body.append(f"• {trait}\n", style="dim")
        body.append(f'\n"{profile.catchphrase}"\n', style="italic")
        body.append(
            f"\n{profile.commit_count} commits · {profile.commit_style}",
            style="dim",
        )
        if profile.peak_hours:
            body.append(f" · peak {profile.peak_hours}", style="dim")
        return Panel(body, title=f"[bold cyan]{profile.name}[/bold cyan]", expand=False)

    def export(self, path: Path) -> None:
        """Write everything rendered so far to ``path`` as plain text.

        Raises:
            CodeTheaterError: If the console was not created with record=True
        """
        if not self.console.record:
            raise CodeTheaterError("Export requires a recording console")
        write_text(path, self.console.export_text(clear=False))
