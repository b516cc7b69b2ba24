import asyncio
import logging
import time

logger = logging.getLogger(__name__)

class RateLimiter:
    """Spaces out requests to an API with a published usage limit."""

    def __init__(self, requests_per_minute: int = 60):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests per minute. Nominatim's
                usage policy allows one request per second.
        """
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.requests_per_minute = requests_per_minute
        self.request_interval = 60 / requests_per_minute  # Time between requests in seconds
        self._last_request: float = 0.0
        self._lock = asyncio.Lock()

    async def limit(self):
        """Wait until the next request is allowed."""
        async with self._lock:
            elapsed = time.monotonic() - self._last_request
            if self._last_request and elapsed < self.request_interval:
                wait = self.request_interval - elapsed
                logger.debug(f"⏸️ Waiting {wait:.2f}s before next request")
                await asyncio.sleep(wait)
            self._last_request = time.monotonic()
