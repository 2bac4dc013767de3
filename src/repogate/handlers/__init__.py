"""
Capability handlers.
"""

from repogate.handlers._base import ExecHandler, FileHandler, SearchHandler
from repogate.handlers.files import LocalFileHandler
from repogate.handlers.search import DisabledSearchHandler

__all__ = [
    "FileHandler",
    "ExecHandler",
    "SearchHandler",
    "LocalFileHandler",
    "DisabledSearchHandler",
]
