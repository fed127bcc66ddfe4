"""Shared fakes for the git and generator collaborators."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from stylepub.generator import GeneratorError
from stylepub.git import GitError

MUTATING_CALLS = {"checkout", "merge", "generate", "add_all", "commit", "push"}


class FakeRepo:
    """In-memory stand-in for `GitRepo` that records every call in order."""

    def __init__(self, root: Path, calls: list[tuple], *, branch: str = "master", untracked=(), fail_on=()) -> None:
        self.root = root
        self.branch = branch
        self.calls = calls
        self._untracked = list(untracked)
        self._fail_on = set(fail_on)

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self._fail_on:
            raise GitError(f"{name} failed")

    def untracked_files(self) -> list[str]:
        self._record("untracked_files")
        return list(self._untracked)

    def current_branch(self) -> str:
        return self.branch

    def checkout(self, ref: str) -> None:
        self._record("checkout", ref)
        self.branch = ref

    def merge(self, ref: str) -> None:
        self._record("merge", ref)

    def add_all(self) -> None:
        self._record("add_all")

    def commit(self, message: str, *, allow_empty: bool = False) -> None:
        self._record("commit", message)

    def push(self, remote: str, ref: str) -> None:
        self._record("push", remote, ref)


class FakeGenerator:
    """Stand-in for `DocGenerator` that writes a single page into the output directory."""

    def __init__(self, root: Path, calls: list[tuple], *, fail: bool = False) -> None:
        self.root = root
        self.calls = calls
        self.fail = fail
        self.saw_stale_output: bool | None = None

    def generate(self, layout: str, source, output_dir) -> Path:
        self.calls.append(("generate", layout, str(source), str(output_dir)))
        out = self.root / output_dir
        self.saw_stale_output = (out / "stale.html").exists()
        if self.fail:
            raise GeneratorError("docco exploded")
        out.mkdir(parents=True, exist_ok=True)
        (out / "index.html").write_text("<html></html>", encoding="utf-8")
        return out


@pytest.fixture
def calls() -> list[tuple]:
    return []


def mutating(calls: list[tuple]) -> list[tuple]:
    return [c for c in calls if c[0] in MUTATING_CALLS]


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def git_env(tmp_path: Path) -> dict[str, str]:
    """Isolated git environment: no user/system config, fixed identity."""
    home = tmp_path / "home"
    home.mkdir()
    env = dict(os.environ)
    env.update(
        {
            "HOME": str(home),
            "LC_ALL": "C",
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_CONFIG_GLOBAL": os.devnull,
            "GIT_AUTHOR_NAME": "stylepub-tests",
            "GIT_AUTHOR_EMAIL": "stylepub-tests@example.invalid",
            "GIT_COMMITTER_NAME": "stylepub-tests",
            "GIT_COMMITTER_EMAIL": "stylepub-tests@example.invalid",
        }
    )
    return env


def git(cwd: Path, env: dict[str, str], *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout
