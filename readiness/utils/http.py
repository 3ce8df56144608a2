"""
Probe client for single timed exchanges with the service under test.

Every higher component (load engine, probe battery) talks to the target
through ProbeClient.request(). Transport failures never escape as
exceptions: they come back as a ProbeResponse with status 0 and a generic
error marker. The client never retries; retry policy belongs to the caller.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from readiness.utils.logger import get_logger
from readiness.config import (
    REQUEST_TIMEOUT,
    USER_AGENT,
    VERIFY_SSL,
    FOLLOW_REDIRECTS,
    ERROR_TIMEOUT,
    ERROR_CONNECTION,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProbeResponse:
    """Outcome of one exchange. status is 0 when no response was received."""
    status: int
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0            # milliseconds
    cookies: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None     # ERROR_TIMEOUT / ERROR_CONNECTION

    @property
    def ok(self) -> bool:
        """True when a response was received, whatever its status."""
        return self.error is None

    @property
    def succeeded(self) -> bool:
        """True for a received 2xx response."""
        return self.ok and 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @classmethod
    def failure(cls, marker: str, elapsed: float = 0.0) -> 'ProbeResponse':
        return cls(status=0, elapsed=elapsed, error=marker)


class ProbeClient:
    """
    Wrapper around requests.Session bound to one base address.

    Features:
    - Fixed per-call timeout (from config.py)
    - No automatic retries (urllib3 Retry with total=0)
    - Elapsed time measured around the whole exchange
    - Every call starts with an empty cookie jar; cookies a response
      sets are reported on ProbeResponse.cookies and never replayed
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = None,
        user_agent: Optional[str] = None,
        verify_ssl: bool = None,
        headers: Optional[Dict[str, str]] = None,
        pool_size: int = 10,
    ):
        """
        Args:
            base_url: Address of the service under test
            timeout: Per-call timeout in seconds (default from config)
            user_agent: Custom User-Agent header (default from config)
            verify_ssl: Whether to verify TLS certificates (default from config)
            headers: Optional headers sent with every call
            pool_size: Connection pool size for the underlying adapter
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT
        self.request_count = 0

        self.session = requests.Session()
        self.session.verify = verify_ssl if verify_ssl is not None else VERIFY_SSL

        no_retry = Retry(total=0, connect=0, read=0, redirect=0, status=0,
                         raise_on_redirect=False, raise_on_status=False)
        adapter = HTTPAdapter(max_retries=no_retry, pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            'User-Agent': user_agent or USER_AGENT,
            'Accept': 'application/json, text/html;q=0.9, */*;q=0.8',
        })
        if headers:
            self.session.headers.update(headers)

    def url_for(self, path: str) -> str:
        """Join a request path onto the base address."""
        if path.startswith(('http://', 'https://')):
            return path
        if not path.startswith('/'):
            path = '/' + path
        return self.base_url + path

    def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ProbeResponse:
        """
        Perform one exchange against the base address.

        Args:
            method: HTTP method
            path: Path relative to the base address
            body: dict/list bodies are sent as JSON, anything else as raw data
            headers: Extra headers for this call only

        Returns:
            ProbeResponse; never raises for transport errors
        """
        url = self.url_for(path)
        kwargs: Dict[str, Any] = {
            'headers': headers,
            'timeout': self.timeout,
            'allow_redirects': FOLLOW_REDIRECTS,
        }
        if isinstance(body, (dict, list)):
            kwargs['json'] = body
        elif body is not None:
            kwargs['data'] = body

        # A login elsewhere in the battery must not authenticate this call
        self.session.cookies.clear()

        self.request_count += 1
        start = time.perf_counter()
        try:
            response = self.session.request(method.upper(), url, **kwargs)
        except requests.exceptions.Timeout as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(f"{method.upper()} {url} timed out after {elapsed:.0f}ms: {e}")
            return ProbeResponse.failure(ERROR_TIMEOUT, elapsed)
        except requests.exceptions.RequestException as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(f"{method.upper()} {url} failed: {e}")
            return ProbeResponse.failure(ERROR_CONNECTION, elapsed)

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"{method.upper()} {url} -> {response.status_code} in {elapsed:.1f}ms")
        return ProbeResponse(
            status=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            elapsed=elapsed,
            cookies=response.cookies.get_dict(),
        )

    def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> ProbeResponse:
        return self.request('GET', path, headers=headers)

    def post(self, path: str, body: Optional[Any] = None,
             headers: Optional[Dict[str, str]] = None) -> ProbeResponse:
        return self.request('POST', path, body=body, headers=headers)

    def close(self):
        """Close the session and release resources."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
