"""
codetheater.cli - Typer CLI entry point.

Provides the generate, releases, characters, sessions and cache-clear
commands.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from codetheater import __version__
from codetheater.config import GENRES, TheaterConfig, load_config
from codetheater.exceptions import CodeTheaterError
from codetheater.git import GitExtractor, GitService, RemoteHandler, repo_hash
from codetheater.git.extractor import ExtractionResult
from codetheater.git.remote import is_git_url, is_github_shorthand
from codetheater.logging import configure_logging

app = typer.Typer(
    name="codetheater",
    help="Turn git history into a screenplay.\n\n"
    "Extracts a commit range, casts the contributors as characters and has an "
    "LLM director write the scenes, rendered live in the terminal.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"codetheater {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Code Theater - git history as a screenplay."""
    pass


def resolve_repo(repo: str, out: Console) -> tuple[Path, TheaterConfig]:
    """Resolve the repo argument and load config with its .codetheater.yaml."""
    base = load_config()
    repo_path = RemoteHandler(base.repos_dir).resolve(repo, console=out)
    return repo_path, load_config(repo_path)


def story_key(repo: str, config: TheaterConfig) -> str:
    """Session key for a repo argument, computed without cloning."""
    if is_git_url(repo):
        return repo_hash(RemoteHandler(config.repos_dir).local_path_for(repo))
    local = Path(repo).expanduser()
    if not local.exists() and is_github_shorthand(repo):
        url = f"https://github.com/{repo}.git"
        return repo_hash(RemoteHandler(config.repos_dir).local_path_for(url))
    return repo_hash(local.resolve())


def extract_commits(
    repo_path: Path,
    config: TheaterConfig,
    from_ref: str | None,
    to_ref: str | None,
    use_cache: bool = True,
) -> ExtractionResult:
    from codetheater.cache import CommitCache

    cache = CommitCache(config.cache_dir, timedelta(hours=config.cache_ttl_hours))
    key_path = str(repo_path)

    if use_cache:
        cached = cache.get(key_path, from_ref, to_ref)
        if cached is not None:
            console.print("[dim]Using cached commit history[/dim]")
            return cached

    extraction = GitExtractor(GitService.create(repo_path)).extract(from_ref, to_ref)
    cache.set(key_path, from_ref, to_ref, extraction)
    return extraction


@app.command("generate")
def generate(
    repo: str = typer.Option(".", "--repo", "-r", help="Local path, git URL or owner/repo"),
    from_ref: str | None = typer.Option(
        None, "--from", "-f", help="Start ref (default: latest tag)"
    ),
    to_ref: str | None = typer.Option(None, "--to", "-t", help="End ref (default: HEAD)"),
    genre: str | None = typer.Option(
        None, "--genre", "-g", help=f"Screenplay genre: {', '.join(GENRES)}"
    ),
    continue_story: bool = typer.Option(
        False, "--continue", "-c", help="Continue the story from the previous act"
    ),
    forget: bool = typer.Option(False, "--forget", help="Forget the previous story first"),
    full: bool = typer.Option(False, "--full", help="One scene per commit"),
    highlights_only: bool = typer.Option(
        False, "--highlights-only", help="Only dramatize pivotal commits"
    ),
    export: Path | None = typer.Option(
        None, "--export", "-e", help="Also write the screenplay to a text file"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore cached commit history"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Generate a screenplay act for a commit range."""
    configure_logging(verbose)

    from codetheater.characters import CharacterPool
    from codetheater.generator import SceneGenerator
    from codetheater.llm.client import create_client_from_config
    from codetheater.llm.director import DirectorSession
    from codetheater.llm.templates import PromptTemplateManager, genre_direction
    from codetheater.render import TheaterRenderer
    from codetheater.sessions import SessionStore

    out = Console(record=True) if export else console

    try:
        repo_path, config = resolve_repo(repo, out)
        if genre:
            config = load_config(repo_path, overrides={"genre": genre})

        extraction = extract_commits(repo_path, config, from_ref, to_ref, use_cache=not no_cache)
        commits = extraction.commits
        out.print(
            f"[dim]{len(commits)} commits from {extraction.from_ref or 'the beginning'} "
            f"to {extraction.to_ref}[/dim]"
        )

        cast = CharacterPool(extraction.contributors)
        templates = PromptTemplateManager()
        system_prompt = templates.render(
            "director_system.txt",
            {
                "GENRE": config.genre,
                "GENRE_DIRECTION": genre_direction(config.genre),
                "CAST": list(cast.profiles.values()),
                "ENSEMBLE": cast.ensemble,
            },
        )
        director = DirectorSession(create_client_from_config(config), system_prompt)

        key = repo_hash(repo_path)
        store = SessionStore(config.state_dir, templates)
        start = store.begin_act(
            key,
            str(repo_path),
            continue_story=continue_story,
            forget=forget,
            director_session_id=director.session_id,
        )
        renderer = TheaterRenderer(out)
        if forget:
            out.print("[dim]Cleared previous story[/dim]")
        if start.narrative:
            renderer.render_previously_on(start.narrative.key_events)
        elif continue_story:
            out.print("[yellow]No previous story found. Starting fresh.[/yellow]")

        generator = SceneGenerator(renderer, templates, config.density)
        result = generator.generate(
            commits,
            director,
            cast,
            genre=config.genre,
            act_number=start.act_number,
            full=full,
            highlights_only=highlights_only,
            recap=start.recap,
        )

        store.save_act_summary(key, start.act_number, director, commits[-1].sha, console=out)

        if export:
            renderer.export(export)
            console.print(f"[green]✓[/green] Screenplay exported to {export}")
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    usage = director.client.get_token_usage()
    console.print(
        f"[dim]{result.scenes_count} scenes ({result.mode} mode), "
        f"{usage['total_tokens']} tokens[/dim]"
    )


@app.command("releases")
def releases(
    repo: str = typer.Option(".", "--repo", "-r", help="Local path, git URL or owner/repo"),
) -> None:
    """List release tags with commit counts."""
    from codetheater.render import TheaterRenderer

    try:
        repo_path, _ = resolve_repo(repo, console)
        tags, counts = GitExtractor(GitService.create(repo_path)).list_releases()
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    TheaterRenderer(console).render_releases(tags, counts)


@app.command("characters")
def characters(
    repo: str = typer.Option(".", "--repo", "-r", help="Local path, git URL or owner/repo"),
    from_ref: str | None = typer.Option(None, "--from", "-f", help="Start ref"),
    to_ref: str | None = typer.Option(None, "--to", "-t", help="End ref"),
) -> None:
    """Show the cast for a commit range."""
    from codetheater.characters import CharacterPool
    from codetheater.render import TheaterRenderer

    try:
        repo_path, config = resolve_repo(repo, console)
        extraction = extract_commits(repo_path, config, from_ref, to_ref)
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    cast = CharacterPool(extraction.contributors)
    if not cast.profiles:
        console.print("[yellow]No human contributors found.[/yellow]")
        return
    TheaterRenderer(console).render_character_cards(cast)


@app.command("sessions")
def sessions(
    list_all: bool = typer.Option(False, "--list", "-l", help="List stored stories"),
    clear: bool = typer.Option(False, "--clear", help="Forget the story for --repo"),
    repo: str | None = typer.Option(None, "--repo", "-r", help="Repository for --clear"),
    clear_all: bool = typer.Option(False, "--clear-all", help="Forget every stored story"),
) -> None:
    """Manage stored story sessions."""
    from codetheater.sessions import SessionStore

    try:
        config = load_config()
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    store = SessionStore(config.state_dir)

    if clear_all:
        try:
            store.clear_all()
        except CodeTheaterError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        console.print("[green]✓[/green] Cleared all stories")
        return

    if clear:
        if not repo:
            console.print("[red]Error: --clear requires --repo[/red]")
            raise typer.Exit(1)
        if store.clear(story_key(repo, config)):
            console.print(f"[green]✓[/green] Cleared story for {repo}")
        else:
            console.print(f"[yellow]No story stored for {repo}[/yellow]")
        return

    stored = store.list_sessions()
    if not stored:
        console.print("[yellow]No stored stories.[/yellow]")
        return

    table = Table(title="Stories")
    table.add_column("Repository", style="cyan")
    table.add_column("Acts", justify="right")
    table.add_column("Last generated", style="green")
    table.add_column("Key", style="dim")
    for key, session in stored:
        table.add_row(
            session.repo_path or "-",
            str(session.act_count),
            session.last_generated.strftime("%Y-%m-%d %H:%M"),
            key[:8],
        )
    console.print(table)


@app.command("cache-clear")
def cache_clear() -> None:
    """Delete cached commit history."""
    from codetheater.cache import CommitCache

    try:
        config = load_config()
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        removed = CommitCache(config.cache_dir).clear()
    except CodeTheaterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed {removed} cache entries")


if __name__ == "__main__":
    app()
