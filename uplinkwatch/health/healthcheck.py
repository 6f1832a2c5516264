"""Health ping client for external uptime checkers."""

import asyncio

import aiohttp
import structlog

from ..core.errors import HealthCheckError
from ..core.interfaces import IHealthCheck

logger = structlog.get_logger(__name__)

USER_AGENT = "uplinkwatch-healthcheck/1.0"


class HttpHealthCheck(IHealthCheck):
    """Sends a GET request to a health check URL. An empty URL disables it."""

    def __init__(self, url: str = "", timeout: float = 5.0):
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._url)

    async def ping(self) -> None:
        if not self._url:
            return

        logger.debug(f"Sending healthcheck to {self._url}")
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(self._url, headers={"User-Agent": USER_AGENT}) as response:
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HealthCheckError(f"Error sending healthcheck: {e!r}") from e

        if not 200 <= status < 300:
            raise HealthCheckError(f"Healthcheck returned status code: {status}")
        logger.debug(f"Healthcheck succeeded: status {status}")
