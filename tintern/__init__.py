"""
Tintern client - session handling, authenticated API gateway, route guard
and optimistic profile collections for the Tintern job-search backend.
"""

from version import __version__

__all__ = ["__version__"]
