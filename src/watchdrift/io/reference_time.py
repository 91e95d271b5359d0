"""Trusted reference time from NTP servers, falling back to the device clock."""

import dataclasses
from typing import Callable, List, Optional, Sequence

import ntplib
import pydantic

from watchdrift.core import config, models

logger = config.get_logger()

NTP_SERVERS = ("pool.ntp.org", "time.google.com", "time.cloudflare.com")
NTP_PORT = 123
NTP_TIMEOUT_SECONDS = 5.0
NTP_CACHE_DURATION_MS = 60_000


class ReferenceTime(pydantic.BaseModel):
    """A trusted timestamp and its provenance.

    Attributes:
        timestamp: Epoch milliseconds.
        source: Whether the time came from NTP or the device clock.
        server_used: The NTP server that answered, if one was queried.
    """

    timestamp: int
    source: models.TimeSource
    server_used: Optional[str] = None


@dataclasses.dataclass
class OffsetCache:
    """Last known offset between NTP time and the device clock.

    Attributes:
        ttl_ms: How long a stored offset stays valid.
        offset_ms: The cached offset, None when nothing is cached.
        synced_at: Device time of the sync that produced the offset.
    """

    ttl_ms: int = NTP_CACHE_DURATION_MS
    offset_ms: Optional[int] = None
    synced_at: int = 0

    def get(self, now: int) -> Optional[int]:
        """Return the cached offset if it is still fresh at device time `now`."""
        if self.offset_ms is None or now - self.synced_at >= self.ttl_ms:
            return None
        return self.offset_ms

    def store(self, offset_ms: int, now: int) -> None:
        """Remember an offset measured at device time `now`."""
        self.offset_ms = offset_ms
        self.synced_at = now

    def invalidate(self) -> None:
        """Forget the cached offset."""
        self.offset_ms = None
        self.synced_at = 0


class ReferenceClock:
    """Provides trusted timestamps for measurement captures.

    Servers are tried in order and the first answer wins. A successful sync is
    cached as an offset from the device clock, so that captures in quick succession
    do not hit the network. When no server answers the device clock is used and the
    result is tagged accordingly.
    """

    def __init__(
        self,
        servers: Sequence[str] = NTP_SERVERS,
        timeout: float = NTP_TIMEOUT_SECONDS,
        cache: Optional[OffsetCache] = None,
        ntp_client: Optional[ntplib.NTPClient] = None,
        clock: Callable[[], int] = models.now_ms,
    ) -> None:
        """Initialize the reference clock.

        Args:
            servers: NTP servers, in order of preference.
            timeout: Seconds to wait for each server.
            cache: Offset cache, a fresh one with the default TTL if None.
            ntp_client: Client used to query the servers.
            clock: Device clock returning epoch milliseconds.
        """
        self.servers: List[str] = list(servers)
        self.timeout = timeout
        self.cache = cache if cache is not None else OffsetCache()
        self.ntp_client = ntp_client if ntp_client is not None else ntplib.NTPClient()
        self.clock = clock

    def get_reference_time(self) -> ReferenceTime:
        """Get the best available trusted time.

        Returns:
            An NTP timestamp, from the cached offset when fresh, or the device time
            if every server failed.
        """
        now = self.clock()
        cached_offset = self.cache.get(now)
        if cached_offset is not None:
            return ReferenceTime(
                timestamp=now + cached_offset, source=models.TimeSource.ntp
            )

        for server in self.servers:
            try:
                response = self.ntp_client.request(
                    server, version=3, port=NTP_PORT, timeout=self.timeout
                )
            except (ntplib.NTPException, OSError) as e:
                logger.warning("NTP server %s failed: %s", server, e)
                continue

            ntp_time = int(response.tx_time * 1000)
            device_time = self.clock()
            self.cache.store(ntp_time - device_time, device_time)
            logger.debug("Synced with %s, offset %s ms.", server, ntp_time - device_time)
            return ReferenceTime(
                timestamp=ntp_time, source=models.TimeSource.ntp, server_used=server
            )

        logger.warning("No NTP server reachable, falling back to device time.")
        return self.get_device_time()

    def get_device_time(self) -> ReferenceTime:
        """Get the device clock time."""
        return ReferenceTime(timestamp=self.clock(), source=models.TimeSource.device)

    def clear_cache(self) -> None:
        """Force the next call to query the NTP servers."""
        self.cache.invalidate()
