"""
TRW Unix - Command line front end for the TRW rewriting engine

Author: TRW maintainers | 2026-10-18
"""

from .cli import main, build_parser

__all__ = ["main", "build_parser"]
