"""
TRW Version Management - Centralized version for all components

All components import the version from here to keep it consistent.

Author: TRW maintainers | 2026-10-18
"""

# =============================================================================
# TRW Version - Single Source of Truth
# =============================================================================

__version__ = "0.4.0"

# Semantic versioning components
VERSION_MAJOR = 0
VERSION_MINOR = 4
VERSION_PATCH = 0
VERSION_SUFFIX = ""  # e.g., "alpha", "beta", "rc1", ""

# Build metadata
BUILD_DATE = "2026-10-18"

# Full version string with optional suffix
VERSION_FULL = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
if VERSION_SUFFIX:
    VERSION_FULL = f"{VERSION_FULL}-{VERSION_SUFFIX}"


def get_version_info() -> dict:
    """Get detailed version information."""
    return {
        "version": __version__,
        "major": VERSION_MAJOR,
        "minor": VERSION_MINOR,
        "patch": VERSION_PATCH,
        "suffix": VERSION_SUFFIX,
        "full": VERSION_FULL,
        "build_date": BUILD_DATE,
    }


def get_short_banner() -> str:
    """Get a compact version banner."""
    return f"TRW v{__version__} | text rewriting engine | {BUILD_DATE}"

