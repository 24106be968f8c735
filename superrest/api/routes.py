"""
FastAPI routes for a ResourceController.

resource_router() builds an APIRouter exposing the seven REST endpoints
of one controller. Handlers translate the HTTP request into a
ResourceRequest, resolve path identifiers into entities, run the
synchronous controller call in the thread pool, and encode the result.
Errors propagate to the handlers installed by create_app().
"""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..model.base import encode_collection
from .controller import ResourceController, ResourceRequest

logger = logging.getLogger(__name__)


async def to_resource_request(request: Request) -> ResourceRequest:
    """Extract body, actor, query and headers from an HTTP request."""
    body = await request.body()
    return ResourceRequest(
        body=body or None,
        actor=request.headers.get("X-Actor"),
        query=dict(request.query_params),
        headers=dict(request.headers),
    )


def resource_router(
    controller: ResourceController,
    prefix: str | None = None,
    tags: list[str] | None = None,
) -> APIRouter:
    """Create the REST routes for a controller.

    Args:
        controller: Controller to dispatch to
        prefix: URL prefix (defaults to "/<table name>")
        tags: OpenAPI tags (defaults to the model name)

    Returns:
        APIRouter ready for app.include_router()
    """
    prefix = prefix or f"/{controller.model.get_table_name()}"
    router = APIRouter(prefix=prefix, tags=tags or [controller.model.__name__])

    @router.get("")
    async def index(request: Request) -> JSONResponse:
        """List entities."""
        req = await to_resource_request(request)
        entities = await run_in_threadpool(controller.index, req)
        return JSONResponse(encode_collection(entities))

    @router.post("")
    async def create(request: Request) -> JSONResponse:
        """Create an entity from the JSON body."""
        req = await to_resource_request(request)
        entity = await run_in_threadpool(controller.create, req)
        return JSONResponse(entity.to_json())

    @router.delete("")
    async def clear(request: Request) -> Response:
        """Delete entities (bulk)."""
        req = await to_resource_request(request)
        await run_in_threadpool(controller.clear, req)
        return Response(status_code=200)

    @router.get("/{entity_id}")
    async def show(entity_id: int, request: Request) -> JSONResponse:
        """Get one entity."""
        req = await to_resource_request(request)
        entity = await run_in_threadpool(controller.resolve, entity_id)
        entity = await run_in_threadpool(controller.show, req, entity)
        return JSONResponse(entity.to_json())

    @router.patch("/{entity_id}")
    async def update(entity_id: int, request: Request) -> JSONResponse:
        """Partially update one entity."""
        req = await to_resource_request(request)
        entity = await run_in_threadpool(controller.resolve, entity_id)
        entity = await run_in_threadpool(controller.update, req, entity)
        return JSONResponse(entity.to_json())

    @router.put("/{entity_id}")
    async def replace(entity_id: int, request: Request) -> JSONResponse:
        """Replace one entity."""
        req = await to_resource_request(request)
        entity = await run_in_threadpool(controller.resolve, entity_id)
        entity = await run_in_threadpool(controller.replace, req, entity)
        return JSONResponse(entity.to_json())

    @router.delete("/{entity_id}")
    async def destroy(entity_id: int, request: Request) -> Response:
        """Delete one entity."""
        req = await to_resource_request(request)
        entity = await run_in_threadpool(controller.resolve, entity_id)
        await run_in_threadpool(controller.destroy, req, entity)
        return Response(status_code=200)

    logger.debug(f"Routes for {controller.model.__name__} mounted at {prefix}")
    return router
