"""
Search tools for codectx-mcp.

These tools locate code in the workspace:
- search_code: Case-insensitive text search
- semantic_search: Embedding-based search by meaning
"""

import asyncio
import logging
from uuid import UUID

from codectx.main import CodeContextService

from codectx_mcp.schemas.inputs import SearchCodeInput, SemanticSearchInput
from codectx_mcp.schemas.outputs import (
    SearchCodeOutput,
    SemanticSearchHit,
    SemanticSearchOutput,
)

logger = logging.getLogger(__name__)


class SearchTools:
    """Text and semantic search over the workspace."""

    def __init__(self, service: CodeContextService) -> None:
        self.service = service

    async def search_code(
        self,
        input_data: SearchCodeInput,
        request_id: UUID,
    ) -> SearchCodeOutput:
        """
        Find lines containing the given text in source files.

        Args:
            input_data: Validated input parameters
            request_id: Unique request identifier

        Returns:
            SearchCodeOutput with formatted matches
        """
        logger.info(f"search_code: text={input_data.text!r}")

        loop = asyncio.get_running_loop()
        matches = await loop.run_in_executor(None, self.service.search_code, input_data.text)

        return SearchCodeOutput(
            request_id=request_id,
            matches=matches,
            total=len(matches),
        )

    async def semantic_search(
        self,
        input_data: SemanticSearchInput,
        request_id: UUID,
    ) -> SemanticSearchOutput:
        """
        Search code by meaning.

        The first call indexes every source file under the base directory.
        An empty result list is returned both when nothing matches and when
        embeddings are not configured; ``embedding_available`` tells the
        two apart.

        Args:
            input_data: Validated input parameters
            request_id: Unique request identifier

        Returns:
            SemanticSearchOutput with ranked hits
        """
        logger.info(f"semantic_search: query={input_data.query!r}, top_k={input_data.top_k}")

        results = await self.service.semantic_search(input_data.query, top_k=input_data.top_k)

        return SemanticSearchOutput(
            request_id=request_id,
            results=[SemanticSearchHit(**r.to_dict()) for r in results],
            embedding_available=self.service.embedding_available,
        )
