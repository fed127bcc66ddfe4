"""
publisher.py

Responsibility: Regenerate the documentation and publish it to the publishing branch.

High-level flow:
0) Refuse to run if the working tree has untracked files
1) Remove the previous output directory
2) Check out the publishing branch
3) Merge the primary branch into it
4) Run the documentation generator
5) Stage everything and commit with a fixed message
6) Push the publishing branch
7) Check out the primary branch again

The first failing step stops the run. Nothing is rolled back: a failure after
step 2 leaves the working tree on the publishing branch for manual inspection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from stylepub.config import PublishConfig
from stylepub.generator import DocGenerator, GeneratorError, remove_output
from stylepub.git import GitError, GitRepo

logger = logging.getLogger(__name__)


class PublishError(RuntimeError):
    exit_code = 1

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step


class PreconditionError(PublishError):
    exit_code = 2


class IntegrationError(PublishError):
    exit_code = 3


class GenerationError(PublishError):
    exit_code = 4


class PushError(PublishError):
    exit_code = 5


@dataclass(frozen=True)
class Step:
    name: str
    description: str
    action: Callable[[], None]
    # Collaborator failures in this step are re-raised as this error type.
    error: type[PublishError] = PublishError


@dataclass
class PublishResult:
    primary_branch: str
    publish_branch: str
    output_dir: Path
    completed_steps: list[str] = field(default_factory=list)


class Publisher:
    def __init__(self, config: PublishConfig, repo: GitRepo, generator: DocGenerator) -> None:
        self.config = config
        self.repo = repo
        self.generator = generator
        self._primary_branch = config.git.primary_branch

    @property
    def primary_branch(self) -> str:
        if self._primary_branch is None:
            try:
                self._primary_branch = self.repo.current_branch()
            except GitError as e:
                raise PreconditionError(str(e), step="precondition") from e
        return self._primary_branch

    @property
    def output_dir(self) -> Path:
        return self.repo.root / self.config.output_dir

    def check_preconditions(self) -> None:
        """
        Fail before any mutation if the working tree holds untracked files.

        Untracked files would otherwise be swept into the publishing commit by `git add -A`.
        """
        try:
            untracked = self.repo.untracked_files()
        except GitError as e:
            raise PreconditionError(str(e), step="precondition") from e
        if untracked:
            listing = "\n".join(f"  {p}" for p in untracked)
            raise PreconditionError(
                f"Working tree has {len(untracked)} untracked file(s); commit, remove or ignore them first:\n{listing}",
                step="precondition",
            )
        if self.primary_branch == self.config.git.publish_branch:
            raise PreconditionError(
                f"Already on the publishing branch {self.config.git.publish_branch!r}; run from the primary branch",
                step="precondition",
            )
        # The run returns to the primary branch, so it must also start there.
        try:
            current = self.repo.current_branch()
        except GitError as e:
            raise PreconditionError(str(e), step="precondition") from e
        if current != self.primary_branch:
            raise PreconditionError(
                f"On branch {current!r} but the primary branch is {self.primary_branch!r}; check it out first",
                step="precondition",
            )

    def _clean(self) -> None:
        if remove_output(self.output_dir):
            logger.debug("Removed %s", self.output_dir)

    def _generate(self) -> None:
        try:
            self.generator.generate(self.config.generator.layout, self.config.source, self.config.output_dir)
        except GeneratorError as e:
            raise GenerationError(str(e), step="generate") from e

    def _commit(self) -> None:
        self.repo.add_all()
        self.repo.commit(self.config.git.commit_message, allow_empty=True)

    def steps(self) -> list[Step]:
        """The publishing steps, in the only order they ever run."""
        git = self.config.git
        primary = self.primary_branch
        return [
            Step("clean", f"remove {self.config.output_dir}/", self._clean),
            Step("checkout", f"check out {git.publish_branch}", lambda: self.repo.checkout(git.publish_branch)),
            Step("merge", f"merge {primary} into {git.publish_branch}", lambda: self.repo.merge(primary), IntegrationError),
            Step(
                "generate",
                f"generate {self.config.output_dir}/ from {self.config.source} ({self.config.generator.layout} layout)",
                self._generate,
                GenerationError,
            ),
            Step("commit", f"commit all changes as {git.commit_message!r}", self._commit),
            Step("push", f"push {git.publish_branch} to {git.remote}", lambda: self.repo.push(git.remote, git.publish_branch), PushError),
            Step("checkout-back", f"check out {primary}", lambda: self.repo.checkout(primary)),
        ]

    def plan(self) -> list[Step]:
        """Steps a run would take; runs no precondition check and mutates nothing."""
        return self.steps()

    def _execute(self, step: Step) -> None:
        try:
            step.action()
        except PublishError:
            raise
        except (GitError, GeneratorError, OSError) as e:
            raise step.error(f"Step {step.name!r} failed: {e}", step=step.name) from e

    def run(self) -> PublishResult:
        self.check_preconditions()

        result = PublishResult(
            primary_branch=self.primary_branch,
            publish_branch=self.config.git.publish_branch,
            output_dir=self.output_dir,
        )
        for step in self.steps():
            logger.info("%s: %s", step.name, step.description)
            self._execute(step)
            result.completed_steps.append(step.name)

        logger.info("Published %s to %s/%s", self.config.output_dir, self.config.git.remote, result.publish_branch)
        return result
