"""Concurrent liveness probes for HTTP, HTTPS and raw TCP services."""
import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Optional, Tuple

import aiohttp

from ..config.service_config import DEFAULT_SERVICES, ServiceSpec
from .window_queries import now_ms

logger = logging.getLogger(__name__)

STATUS_ONLINE = "online"
STATUS_OFFLINE = "offline"
STATUS_ERROR = "error"


@dataclass
class ServiceHealthResult:
    """Outcome of a single probe."""
    name: str
    status: str  # "online", "offline", "error"
    status_code: Optional[int]
    response_time_ms: int
    last_checked_at: int
    host: str
    port: int
    protocol: str
    error: Optional[str] = None

    @property
    def is_online(self) -> bool:
        return self.status == STATUS_ONLINE

    def to_dict(self) -> dict:
        return asdict(self)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


async def check_tcp_port(host: str, port: int, timeout_ms: int = 3000) -> Tuple[bool, Optional[str]]:
    """Open and close a TCP connection; returns (healthy, error)."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout_ms / 1000
        )
    except asyncio.TimeoutError:
        return False, f"timed out after {timeout_ms}ms"
    except OSError as e:
        return False, str(e) or e.__class__.__name__

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        # peer reset during close; the connect already succeeded
        pass
    return True, None


async def check_http_endpoint(spec: ServiceSpec,
                              session: aiohttp.ClientSession) -> Tuple[bool, Optional[int], Optional[str]]:
    """GET the service URL; healthy for status 200-399. Returns (healthy, status, error)."""
    timeout = aiohttp.ClientTimeout(total=spec.timeout_ms / 1000)
    try:
        async with session.get(spec.url, timeout=timeout, allow_redirects=False) as response:
            return 200 <= response.status < 400, response.status, None
    except asyncio.TimeoutError:
        return False, None, f"timed out after {spec.timeout_ms}ms"
    except aiohttp.ClientError as e:
        return False, None, str(e) or e.__class__.__name__


async def check_service(spec: ServiceSpec,
                        session: Optional[aiohttp.ClientSession] = None) -> ServiceHealthResult:
    """Probe one service. Never raises: failures are reported in the result."""
    started = time.monotonic()
    status_code = None
    error = None

    try:
        if spec.protocol in ("http", "https"):
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    healthy, status_code, error = await check_http_endpoint(spec, own_session)
            else:
                healthy, status_code, error = await check_http_endpoint(spec, session)
        else:
            healthy, error = await check_tcp_port(spec.host, spec.port, spec.timeout_ms)
            status_code = 200 if healthy else 503
        status = STATUS_ONLINE if healthy else STATUS_OFFLINE
    except Exception as e:
        logger.exception("Health check for %s failed unexpectedly", spec.name)
        status = STATUS_ERROR
        error = str(e) or e.__class__.__name__

    result = ServiceHealthResult(
        name=spec.name,
        status=status,
        status_code=status_code,
        response_time_ms=_elapsed_ms(started),
        last_checked_at=now_ms(),
        host=spec.host,
        port=spec.port,
        protocol=spec.protocol,
        error=error,
    )
    logger.debug("Service %s is %s (%dms)", spec.name, result.status, result.response_time_ms)
    return result


async def check_all(specs: Optional[Iterable[ServiceSpec]] = None) -> Dict[str, ServiceHealthResult]:
    """Probe every service concurrently and map service name to result.

    Each probe is bounded by its own timeout, so a hanging service cannot
    delay the others.
    """
    specs = list(DEFAULT_SERVICES if specs is None else specs)
    if not specs:
        return {}

    async with aiohttp.ClientSession() as session:
        results = await asyncio.gather(*(check_service(spec, session) for spec in specs))

    return {result.name: result for result in results}


def check_all_sync(specs: Optional[Iterable[ServiceSpec]] = None) -> Dict[str, ServiceHealthResult]:
    """Run check_all from a thread without an event loop."""
    return asyncio.run(check_all(specs))
