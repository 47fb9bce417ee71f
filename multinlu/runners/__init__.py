"""
multinlu Runners - command line entry points
"""

from .cli import run_cli, build_parser

__all__ = ["run_cli", "build_parser"]
