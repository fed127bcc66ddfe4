"""
cli.py

Responsibility: CLI entrypoint for stylepub.

Running `stylepub` with no arguments publishes the documentation:
1) Load config (defaults, optional `.stylepub.yml`, flag overrides) -> `PublishConfig`
2) Wire the git and generator collaborators into a `Publisher`
3) Run it, mapping failures to exit codes

This module should orchestrate behavior but keep concerns isolated:
- Configuration: `config.py`
- Git: `git.py`
- Documentation generator: `generator.py`
- Step sequencing: `publisher.py`
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stylepub import __version__
from stylepub.config import ConfigError, PublishConfig, load_config, with_overrides
from stylepub.generator import DocGenerator
from stylepub.git import GitRepo
from stylepub.publisher import PublishError, Publisher

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(args: argparse.Namespace) -> PublishConfig:
    config = load_config(args.config, repo_root=args.repo)
    return with_overrides(
        config,
        source=args.source,
        output_dir=args.output_dir,
        layout=args.layout,
        remote=args.remote,
        primary_branch=args.primary_branch,
        publish_branch=args.publish_branch,
    )


def build_publisher(config: PublishConfig, repo_root: str | Path) -> Publisher:
    repo = GitRepo(repo_root)
    generator = DocGenerator(config.generator.command, cwd=repo.root)
    return Publisher(config, repo, generator)


def publish_cmd(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    publisher = build_publisher(config, args.repo)

    if args.dry_run:
        for i, step in enumerate(publisher.plan(), start=1):
            print(f"{i}. {step.name}: {step.description}")
        return 0

    publisher.run()
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="stylepub",
        description="Regenerate the style guide documentation and publish it to the publishing branch",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--repo", default=".", help="Repository root (default: current directory)")
    p.add_argument("--config", default=None, help="YAML config file (default: <repo>/.stylepub.yml if present)")

    p.add_argument("--source", default=None, help="Content document to document (overrides config)")
    p.add_argument("--output-dir", default=None, help="Generated output directory (overrides config)")
    p.add_argument("--layout", default=None, help="Generator layout, e.g. linear or parallel (overrides config)")

    p.add_argument("--remote", default=None, help="Remote to push to (overrides config)")
    p.add_argument("--primary-branch", default=None, help="Branch to merge from and return to (default: current branch)")
    p.add_argument("--publish-branch", default=None, help="Branch the generated output is committed to (overrides config)")

    p.add_argument("--dry-run", action="store_true", help="Print the steps that would run, change nothing")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every git and generator command")

    p.set_defaults(func=publish_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(bool(args.verbose))
    try:
        return int(args.func(args))
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except PublishError as e:
        where = f" (step: {e.step})" if e.step else ""
        logger.debug("Publish aborted%s", where, exc_info=True)
        print(f"error{where}: {e}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
