"""Search collaborator adapters."""

from __future__ import annotations

from repogate._types import SearchHit
from repogate.errors import SearchDisabledError
from repogate.handlers._base import SearchHandler


class DisabledSearchHandler(SearchHandler):
    """Default handler when no search engine is configured."""

    async def search(self, query: str) -> list[SearchHit]:
        raise SearchDisabledError("search feature is not enabled")
