"""Network reachability checks performed before OpenAI thread-mode requests."""

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ReachabilityMonitor(ABC):
    """Reports whether the network is reachable."""

    @abstractmethod
    async def is_connected(self) -> bool:
        """Return True when a network connection is available."""


class StaticReachability(ReachabilityMonitor):
    """Fixed answer, for tests and for environments without a probe."""

    def __init__(self, connected: bool = True):
        self.connected = connected

    async def is_connected(self) -> bool:
        return self.connected


class TCPProbeReachability(ReachabilityMonitor):
    """Opens a short-lived TCP connection to a well-known host."""

    def __init__(self, host: str = "1.1.1.1", port: int = 53, timeout: float = 2.0):
        self._host = host
        self._port = port
        self._timeout = timeout

    async def is_connected(self) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            logger.info("Reachability probe to %s:%s failed: %s", self._host, self._port, e)
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True
