from fastapi import APIRouter, Depends, HTTPException, Request, Response

from server.dependencies.auth import verify_api_key
from server.models.requests import AddOrUpdateRequest, DeleteRequest
from shared.models.indexing import IndexMetadata, IndexOperationResult

router = APIRouter(prefix="/indexes", tags=["indexes"])


def _with_status(response: Response, result: IndexOperationResult) -> IndexOperationResult:
    # backend rejections are reported in the body, the status only flags them
    if not result.success:
        response.status_code = 502
    return result


@router.put("/{index_alias}/documents")
async def add_or_update(
    request: Request,
    response: Response,
    index_alias: str,
    body: AddOrUpdateRequest,
    _: None = Depends(verify_api_key),
) -> IndexOperationResult:
    """Index a content item as one document per declared variation.

    Args:
        request (Request): FastAPI request (provides app.state.indexer_service).
        response (Response): Outgoing response, its status flags backend rejections.
        index_alias (str): The index alias.
        body (AddOrUpdateRequest): The content item.
        _ (None): Auth dependency result (unused).

    Returns:
        IndexOperationResult: Outcome of the operation.
    """
    indexer_service = request.app.state.indexer_service
    try:
        result = await indexer_service.do_add_or_update(
            index_alias,
            key=body.key,
            object_type=body.object_type,
            variations=body.variations,
            fields=body.fields,
            protection=body.protection,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _with_status(response, result)


@router.post("/{index_alias}/documents/delete")
async def delete(
    request: Request,
    response: Response,
    index_alias: str,
    body: DeleteRequest,
    _: None = Depends(verify_api_key),
) -> IndexOperationResult:
    """Delete content items and their descendants."""
    indexer_service = request.app.state.indexer_service
    return _with_status(response, await indexer_service.do_delete(index_alias, body.keys))


@router.post("/{index_alias}/reset")
async def reset(
    request: Request,
    response: Response,
    index_alias: str,
    _: None = Depends(verify_api_key),
) -> IndexOperationResult:
    """Drop and recreate an index with its base mappings."""
    indexer_service = request.app.state.indexer_service
    return _with_status(response, await indexer_service.do_reset(index_alias))


@router.post("/{index_alias}/ensure")
async def ensure(
    request: Request,
    response: Response,
    index_alias: str,
    _: None = Depends(verify_api_key),
) -> IndexOperationResult:
    """Create an index if it does not exist yet."""
    indexer_service = request.app.state.indexer_service
    return _with_status(response, await indexer_service.do_ensure(index_alias))


@router.get("/{index_alias}")
async def metadata(
    request: Request,
    index_alias: str,
    _: None = Depends(verify_api_key),
) -> IndexMetadata:
    """Document count and health of an index."""
    indexer_service = request.app.state.indexer_service
    return await indexer_service.get_metadata(index_alias)
