"""
Top-level package for vc_changelog.

This package turns a range of version-control commits into a changelog.
The command line entry point lives in :mod:`vc_changelog.cli`; the
generation pipeline is assembled in :mod:`vc_changelog.service`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
