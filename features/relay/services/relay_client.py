import logging
import aiohttp
from typing import Any, Optional, Tuple

from core.config import settings
from features.common.exceptions.upstream_exceptions import RelayTargetError

logger = logging.getLogger(__name__)

class RelayClient:
    """Fetches JSON on behalf of a browser from one allowed domain."""

    def __init__(self, allowed_prefix: str = settings.relay_allowed_prefix):
        self._session: Optional[aiohttp.ClientSession] = None
        self.allowed_prefix = allowed_prefix

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.request["timeout"]),
                headers={"User-Agent": settings.request["user_agent"]}
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    def validate_target(self, url: Optional[str]) -> str:
        if not url or not url.startswith(self.allowed_prefix):
            raise RelayTargetError(f"Target {url!r} is outside {self.allowed_prefix}")
        return url

    async def fetch(self, url: str) -> Tuple[int, Optional[Any]]:
        """Upstream status and parsed JSON body; the body is None on failure statuses."""
        target = self.validate_target(url)
        session = await self._init_session()
        async with session.get(target) as response:
            if not 200 <= response.status < 300:
                logger.warning(f"Relay upstream returned {response.status} for {target}")
                return response.status, None
            return response.status, await response.json(content_type=None)
