import asyncio
from typing import Awaitable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
import httpx

from api.forum import ForumClient, UpstreamError
from logging_setup import get_logger

router = APIRouter(prefix="/api", tags=["posts"])

logger = get_logger("api.posts")

# nginx's "client closed request"; never actually reaches the caller
CLIENT_CLOSED_REQUEST = 499

_DISCONNECT_POLL_SECONDS = 0.1


def get_forum_client(request: Request) -> ForumClient:
    return request.app.state.forum_client


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(_DISCONNECT_POLL_SECONDS)


async def _fetch_unless_disconnected(
    request: Request, fetch: Awaitable[httpx.Response]
) -> Optional[httpx.Response]:
    """Await ``fetch``, abandoning it if the caller hangs up first.

    Returns None when the inbound connection closed before the forum answered.
    """
    fetch_task = asyncio.ensure_future(fetch)
    watch_task = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait(
            {fetch_task, watch_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (fetch_task, watch_task):
            if not task.done():
                task.cancel()

    if fetch_task in done:
        return fetch_task.result()
    return None


@router.get("/posts")
async def get_post(
    request: Request,
    post_id: Optional[str] = Query(None, alias="id", description="Forum post identifier"),
    forum: ForumClient = Depends(get_forum_client),
):
    """Fetch a single post from the governance forum and relay it unchanged."""
    post_id = (post_id or "").strip()
    if not post_id:
        raise HTTPException(status_code=400, detail="Post id not provided")

    try:
        upstream = await _fetch_unless_disconnected(request, forum.fetch_post(post_id))
    except UpstreamError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    if upstream is None:
        logger.info("Client disconnected before forum answered", post_id=post_id)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    logger.info("Returning post", post_id=post_id)
    return Response(content=upstream.content, media_type="application/json")
