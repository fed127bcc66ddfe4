"""
config.py

Responsibility: Build the single `PublishConfig` a run uses.

Loading order: built-in defaults -> optional YAML file -> CLI overrides.
The YAML file is optional; when absent the defaults describe the usual
docco + gh-pages setup.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from stylepub.generator import DEFAULT_COMMAND

CONFIG_FILENAME = ".stylepub.yml"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class GeneratorConfig:
    """How the documentation generator is invoked."""

    command: str = DEFAULT_COMMAND
    layout: str = "linear"


@dataclass(frozen=True)
class GitConfig:
    """Branches and remote used for publishing."""

    remote: str = "origin"
    # None means "whatever branch is checked out when the run starts".
    primary_branch: str | None = None
    publish_branch: str = "gh-pages"
    commit_message: str = "Update docs"


@dataclass(frozen=True)
class PublishConfig:
    source: str = "ruby_style_guide.rb"
    output_dir: str = "docs"
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    git: GitConfig = field(default_factory=GitConfig)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    raw = data.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"`{key}` must be an object/mapping when provided.")
    return raw


def _str(data: dict[str, Any], key: str, default: str) -> str:
    raw = data.get(key)
    if raw is None:
        return default
    if not isinstance(raw, str):
        raise ConfigError(f"`{key}` must be a string, got {type(raw).__name__}.")
    value = raw.strip()
    if not value:
        raise ConfigError(f"`{key}` must not be empty.")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ConfigError(f"`{key}` must be a string, got {type(raw).__name__}.")
    return raw.strip() or None


def _check_keys(data: dict[str, Any], allowed: set[str], where: str) -> None:
    unknown = sorted(str(k) for k in data if k not in allowed)
    if unknown:
        raise ConfigError(f"Unknown {where} key(s): {', '.join(unknown)}")


def _check_output_dir(output_dir: str) -> str:
    # The directory is deleted every run, so it must stay inside the repository.
    path = Path(output_dir)
    if path.is_absolute() or ".." in path.parts or path == Path("."):
        raise ConfigError(f"`output_dir` must be a subdirectory of the repository: {output_dir}")
    return output_dir


def parse_config(data: dict[str, Any]) -> PublishConfig:
    """
    Turn a loaded mapping into a `PublishConfig`.

    Recognised keys:
    - source: str
    - output_dir: str
    - generator.command: str (Jinja2 template; `layout`, `source`, `output_dir` are defined and
      substituted raw, so either quote them in the template or use the `shquote` filter)
    - generator.layout: str
    - git.remote / git.primary_branch / git.publish_branch / git.commit_message: str
    """
    _check_keys(data, {"source", "output_dir", "generator", "git"}, "top-level")
    defaults = PublishConfig()

    gen_raw = _section(data, "generator")
    _check_keys(gen_raw, {"command", "layout"}, "generator")
    generator = GeneratorConfig(
        command=_str(gen_raw, "command", defaults.generator.command),
        layout=_str(gen_raw, "layout", defaults.generator.layout),
    )

    git_raw = _section(data, "git")
    _check_keys(git_raw, {"remote", "primary_branch", "publish_branch", "commit_message"}, "git")
    git = GitConfig(
        remote=_str(git_raw, "remote", defaults.git.remote),
        primary_branch=_optional_str(git_raw, "primary_branch"),
        publish_branch=_str(git_raw, "publish_branch", defaults.git.publish_branch),
        commit_message=_str(git_raw, "commit_message", defaults.git.commit_message),
    )

    config = PublishConfig(
        source=_str(data, "source", defaults.source),
        output_dir=_check_output_dir(_str(data, "output_dir", defaults.output_dir)),
        generator=generator,
        git=git,
    )
    if config.git.primary_branch == config.git.publish_branch:
        raise ConfigError("`git.primary_branch` and `git.publish_branch` must differ.")
    return config


def load_config(path: str | Path | None = None, *, repo_root: str | Path = ".") -> PublishConfig:
    """
    Load configuration from `path`, or from `<repo_root>/.stylepub.yml` if it exists.

    An explicit `path` that does not exist is an error; a missing default file is not.
    """
    if path is None:
        candidate = Path(repo_root) / CONFIG_FILENAME
        if not candidate.exists():
            return PublishConfig()
    else:
        candidate = Path(path)
        if not candidate.exists():
            raise ConfigError(f"Config file does not exist: {candidate}")

    try:
        data = yaml.safe_load(candidate.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {candidate}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")
    return parse_config(data)


def with_overrides(
    config: PublishConfig,
    *,
    source: str | None = None,
    output_dir: str | None = None,
    layout: str | None = None,
    remote: str | None = None,
    primary_branch: str | None = None,
    publish_branch: str | None = None,
) -> PublishConfig:
    """Apply CLI overrides; None leaves a value untouched."""
    generator = config.generator
    if layout:
        generator = replace(generator, layout=layout)

    git = config.git
    if remote:
        git = replace(git, remote=remote)
    if primary_branch:
        git = replace(git, primary_branch=primary_branch)
    if publish_branch:
        git = replace(git, publish_branch=publish_branch)

    data: dict[str, Any] = {"generator": generator, "git": git}
    if source:
        data["source"] = source
    if output_dir:
        data["output_dir"] = _check_output_dir(output_dir)
    updated = replace(config, **data)
    if updated.git.primary_branch == updated.git.publish_branch:
        raise ConfigError("Primary and publishing branches must differ.")
    return updated
