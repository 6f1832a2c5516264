"""External address prober using public "what is my IP" services."""

import asyncio
from typing import List, Optional

import aiohttp
import structlog

from ..core.errors import ProbeError
from ..core.interfaces import IAddressProber

logger = structlog.get_logger(__name__)


class HttpAddressProber(IAddressProber):
    """
    Resolves the external address by asking a list of HTTP services.

    Services are tried in order and the first one returning a non-empty
    body with status 200 wins. Each attempt has its own timeout.
    """

    DEFAULT_SERVICES = [
        "https://api.ipify.org?format=text",
        "https://ifconfig.me/ip",
        "https://icanhazip.com",
        "https://api.ip.sb/ip",
    ]

    def __init__(self, services: Optional[List[str]] = None, timeout: float = 10.0):
        """
        Initialize the prober.

        Args:
            services: Service URLs to try, in order
            timeout: Timeout in seconds for each service
        """
        self._services = services or self.DEFAULT_SERVICES
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def probe(self) -> str:
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            for url in self._services:
                try:
                    ip = await self._fetch(session, url)
                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                    logger.debug(f"Error getting external IP from {url}: {e!r}")
                    continue
                logger.debug(f"External IP from {url}: {ip}")
                return ip

        raise ProbeError("Could not get the external IP from any service")

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> str:
        async with session.get(url) as response:
            if response.status != 200:
                raise ValueError(f"status code: {response.status}")
            body = await response.text()

        ip = body.strip()
        if not ip:
            raise ValueError("empty response")
        return ip
