"""
generator.py

Responsibility: Drive the external literate-documentation generator.

Rules:
- The generator is a black box: one command line, one source file in, one directory out.
- The command line is a Jinja2 template rendered with `layout`, `source` and `output_dir`.
- Any non-zero exit, missing executable or missing output directory is a failure.

This module intentionally does NOT know about git, branches or CLI parsing.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "docco -l {{ layout | shquote }} -o {{ output_dir | shquote }} {{ source | shquote }}"


class GeneratorError(RuntimeError):
    pass


def remove_output(output_dir: str | Path) -> bool:
    """
    Delete a previously generated output directory.

    Returns True if something was removed. Succeeds whether or not the directory exists.
    """
    path = Path(output_dir)
    if not path.exists() and not path.is_symlink():
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True


class DocGenerator:
    def __init__(self, command: str = DEFAULT_COMMAND, *, cwd: str | Path = ".") -> None:
        self._command = command
        self._cwd = Path(cwd).resolve()
        self._env = Environment(
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        self._env.filters["shquote"] = lambda value: shlex.quote(str(value))

    def command_for(self, *, layout: str, source: str | Path, output_dir: str | Path) -> list[str]:
        """
        Render the command template into an argv list.

        Values are substituted raw; use the `shquote` filter, or quote them in the template, for paths with spaces.
        """
        context = {"layout": layout, "source": str(source), "output_dir": str(output_dir)}
        try:
            rendered = self._env.from_string(self._command).render(**context)
        except TemplateError as e:
            raise GeneratorError(f"Invalid generator command template: {self._command!r}") from e
        argv = shlex.split(rendered)
        if not argv:
            raise GeneratorError("Generator command is empty")
        return argv

    def generate(self, layout: str, source: str | Path, output_dir: str | Path) -> Path:
        """
        Run the generator against `source`, producing `output_dir`.

        Paths are interpreted relative to the working directory given at construction.
        """
        src = self._cwd / source
        if not src.is_file():
            raise GeneratorError(f"Content document not found: {src}")

        argv = self.command_for(layout=layout, source=source, output_dir=output_dir)
        logger.debug("Running %s", " ".join(argv))
        try:
            subprocess.run(
                argv,
                cwd=str(self._cwd),
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise GeneratorError(f"Generator executable not found: {argv[0]}") from e
        except subprocess.CalledProcessError as e:
            raise GeneratorError(f"Generator failed: {' '.join(argv)}\n\n{e.stdout}") from e

        out = self._cwd / output_dir
        if not out.is_dir():
            raise GeneratorError(f"Generator reported success but produced no output directory: {out}")
        return out
