import asyncio
import json
from typing import Optional

import httpx

from logging_setup import get_logger

logger = get_logger("api.forum")


class UpstreamError(Exception):
    """The forum could not produce a post; carries the status to relay."""

    status_code = 502

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    status_code = 502


class UpstreamTimeout(UpstreamError):
    status_code = 504


class UpstreamStatusError(UpstreamError):
    pass


class UpstreamInvalidResponse(UpstreamError):
    status_code = 502


class ForumClient:
    """Fetches single posts from a Discourse forum's ``posts/`` endpoint."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url
        self.timeout = timeout

    async def _get(self, post_id: str) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            follow_redirects=True,
        ) as client:
            response = await client.get("posts/", params={"id": post_id})
            response.raise_for_status()
            return response

    async def fetch_post(self, post_id: str) -> httpx.Response:
        """Issue one ``GET <base>/posts/?id=<post_id>`` and return the response.

        Raises an ``UpstreamError`` subclass when the forum is unreachable,
        too slow, answers with a non-2xx status, or sends something that is
        not JSON. ``timeout`` bounds the whole exchange, redirects and body
        included.
        """
        logger.debug("Fetching post", post_id=post_id, base_url=self.base_url)
        try:
            response = await asyncio.wait_for(self._get(post_id), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning("Forum timed out", post_id=post_id, error=repr(e))
            raise UpstreamTimeout(f"Timed out fetching post {post_id}")
        except httpx.RequestError as e:
            logger.error("Forum unreachable", post_id=post_id, error=repr(e))
            raise UpstreamUnavailable(f"Error fetching post {post_id}: {str(e)}")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(
                "Forum returned error status",
                post_id=post_id,
                status_code=status,
                reason=e.response.reason_phrase,
            )
            relayed = status if 400 <= status < 600 else 502
            raise UpstreamStatusError(
                f"Forum responded {status} {e.response.reason_phrase} for post {post_id}",
                status_code=relayed,
            )

        try:
            json.loads(response.content)
        except ValueError:
            logger.error("Forum returned invalid JSON", post_id=post_id)
            raise UpstreamInvalidResponse(f"Forum returned invalid JSON for post {post_id}")

        return response
