"""
codetheater.git.remote - Remote repository handling.

Accepts a local path, a git URL, or a GitHub ``owner/repo`` shorthand.
Remote repositories are cloned (shallow) into the state directory and
fetched on later runs.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from codetheater.exceptions import GitError
from codetheater.git.service import run_git

logger = logging.getLogger(__name__)

URL_PREFIXES = ("https://", "http://", "git@", "git://")
CLONE_DEPTH = 500

_SHORTHAND_RE = re.compile(r"^[\w-]+/[\w.-]+$")
_REPO_NAME_RE = re.compile(r"[/:]([^/:]+?)(\.git)?/?$")


def repo_hash(repo_path: str | Path) -> str:
    """Stable identifier for a repository path, used to key sessions."""
    return hashlib.md5(str(repo_path).encode("utf-8")).hexdigest()


def is_git_url(value: str) -> bool:
    return value.startswith(URL_PREFIXES)


def is_github_shorthand(value: str) -> bool:
    return bool(_SHORTHAND_RE.match(value))


def extract_repo_name(url: str) -> str:
    match = _REPO_NAME_RE.search(url)
    return match.group(1) if match else "repo"


class RemoteHandler:
    """Resolves repository arguments to local working trees."""

    def __init__(self, repos_dir: Path) -> None:
        self.repos_dir = repos_dir

    def resolve(self, repo: str, console=None) -> Path:
        """Resolve a repository argument to a local path.

        Args:
            repo: Local path, git URL or ``owner/repo``
            console: Optional rich console for progress output

        Returns:
            Path to a local working tree

        Raises:
            GitError: If a local path does not exist or cloning fails
        """
        if is_git_url(repo):
            return self.clone_to_cache(repo, console=console)

        local = Path(repo).expanduser()
        if local.exists():
            return local.resolve()

        if is_github_shorthand(repo):
            return self.clone_to_cache(f"https://github.com/{repo}.git", console=console)

        raise GitError(f"Repository not found: {local.resolve()}")

    def local_path_for(self, url: str) -> Path:
        digest = hashlib.md5(url.encode("utf-8")).hexdigest()[:8]
        return self.repos_dir / f"{extract_repo_name(url)}-{digest}"

    def clone_to_cache(self, url: str, console=None) -> Path:
        local_path = self.local_path_for(url)

        if local_path.exists():
            if console:
                console.print(f"[dim]Using cached clone: {local_path}[/dim]")
            run_git(["fetch", "--all", "--prune", "--tags"], cwd=local_path)
            return local_path

        self.repos_dir.mkdir(parents=True, exist_ok=True)
        if console:
            console.print(f"[cyan]Cloning {url}...[/cyan]")
        logger.debug("Cloning %s into %s", url, local_path)
        run_git(["clone", "--depth", str(CLONE_DEPTH), "--no-single-branch", url, str(local_path)])

        if console:
            console.print(f"[green]✓[/green] Cloned to {local_path}")
        return local_path
