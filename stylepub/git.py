"""
git.py

Responsibility: Isolate all direct interaction with the `git` executable.

This module must be the only place that:
- Builds git command lines
- Runs git as a subprocess
- Interprets git output (branch names, untracked paths)

The publisher treats `GitRepo` as a black box; it never shells out itself.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    def __init__(self, message: str, *, cmd: list[str] | None = None, output: str = "") -> None:
        super().__init__(message)
        self.cmd = cmd or []
        self.output = output


class GitRepo:
    def __init__(self, root: str | Path, *, git: str = "git", env: dict[str, str] | None = None) -> None:
        self.root = Path(root).resolve()
        self._git = git
        self._env = env

    def _run(self, *args: str) -> str:
        """
        Run a git subcommand in the repository root and return its stdout.

        stderr is folded into the captured output so failures carry git's own explanation.
        """
        cmd = [self._git, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(self.root),
                env=self._env,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise GitError(f"git executable not found: {self._git}", cmd=cmd) from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"Command failed: {' '.join(cmd)}\n\n{e.stdout}", cmd=cmd, output=e.stdout or "") from e
        return proc.stdout

    def untracked_files(self) -> list[str]:
        """Paths git does not track and does not ignore, relative to the root."""
        out = self._run("ls-files", "--others", "--exclude-standard")
        return [line for line in out.splitlines() if line.strip()]

    def current_branch(self) -> str:
        name = self._run("rev-parse", "--abbrev-ref", "HEAD").strip()
        if not name or name == "HEAD":
            raise GitError("HEAD is detached; check out a branch before publishing")
        return name

    def checkout(self, ref: str) -> None:
        self._run("checkout", ref)

    def merge(self, ref: str) -> None:
        # Conflicts make git exit non-zero and leave the merge in progress.
        self._run("merge", "--no-edit", ref)

    def add_all(self) -> None:
        self._run("add", "-A")

    def commit(self, message: str, *, allow_empty: bool = False) -> None:
        args = ["commit", "-m", message]
        if allow_empty:
            args.append("--allow-empty")
        self._run(*args)

    def push(self, remote: str, ref: str) -> None:
        self._run("push", remote, ref)
