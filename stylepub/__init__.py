"""
stylepub package

This package regenerates a style guide's HTML documentation and publishes it
to a long-lived branch.

Key responsibilities are split across modules:
- `config.py`: defaults, optional YAML config file, CLI overrides
- `git.py`: isolated git subprocess interactions
- `generator.py`: external documentation generator invocation and output cleanup
- `publisher.py`: precondition guard and the ordered publishing steps
- `cli.py`: CLI entrypoint (config -> publisher -> exit code)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
