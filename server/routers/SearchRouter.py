from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from shared.models.searching import SearchQuery, SearchResult

router = APIRouter(prefix="/search", tags=["search"])


@router.post("/{index_alias}")
async def search(
    request: Request,
    index_alias: str,
    body: SearchQuery,
    _: None = Depends(verify_api_key),
) -> SearchResult:
    """Search an index with free text, filters, facets and sorters.

    Args:
        request (Request): FastAPI request (provides app.state.searcher_service).
        index_alias (str): The index alias.
        body (SearchQuery): The logical search request.
        _ (None): Auth dependency result (unused).

    Returns:
        SearchResult: Total, documents and facet results. Empty if the backend failed.
    """
    searcher_service = request.app.state.searcher_service
    try:
        return await searcher_service.do_search(index_alias, body)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
