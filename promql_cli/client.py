"""Send PromQL queries to a Prometheus-compatible HTTP API."""

import asyncio
import logging
from urllib.parse import urlsplit

import httpx

from promql_cli.errors import ConfigError, TransportFailure

log = logging.getLogger("promql.client")

GCP_MONITORING_URL = "https://monitoring.googleapis.com/v1/projects/{project}/location/global/prometheus"
GCP_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def parse_header_string(headers: str) -> list[tuple[str, str]]:
    """Parse "Key: Value, Key2: Value2" into header pairs.

    Raises:
        ConfigError: a segment has no ":" separator.
    """
    pairs = []
    if not headers:
        return pairs
    for segment in headers.split(","):
        key, sep, value = segment.partition(":")
        if not sep:
            raise ConfigError(f"invalid header: {segment!r}")
        pairs.append((key.strip(), value.strip()))
    return pairs


def _validate_base_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(f"invalid base URL: {url!r}")
    return url.rstrip("/")


class GoogleCredentials:
    """Bearer tokens from Google Application Default Credentials."""

    def __init__(self):
        import google.auth
        import google.auth.exceptions

        try:
            self.credentials, _ = google.auth.default(scopes=[GCP_SCOPE])
        except google.auth.exceptions.DefaultCredentialsError as e:
            raise ConfigError(
                f"Google credentials not found: {e}",
                hint="Run `gcloud auth application-default login`",
            ) from e

    def _refresh(self) -> None:
        from google.auth.transport.requests import Request

        self.credentials.refresh(Request())

    async def authorization(self) -> str:
        if not self.credentials.valid:
            log.debug("Refreshing Google access token")
            try:
                await asyncio.to_thread(self._refresh)
            except Exception as e:
                raise TransportFailure(f"failed to refresh Google credentials: {e}") from e
        return f"Bearer {self.credentials.token}"


class PrometheusClient:
    """Instant-query client for /api/v1/query.

    Returns raw response bodies; decoding belongs to promql_cli.result.
    """

    def __init__(
        self,
        url: str,
        headers: list[tuple[str, str]] | None = None,
        timeout: float = 30.0,
        credentials=None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = _validate_base_url(url)
        self.headers = list(headers or [])
        self.timeout = timeout
        self.credentials = credentials
        self.transport = transport

    @classmethod
    def from_config(cls, config) -> "PrometheusClient":
        url = config.url
        credentials = None
        if config.project:
            url = GCP_MONITORING_URL.format(project=config.project)
            credentials = GoogleCredentials()
        return cls(
            url,
            headers=parse_header_string(config.headers),
            timeout=config.timeout_seconds,
            credentials=credentials,
        )

    async def query(self, promql: str) -> bytes:
        """Execute an instant PromQL query and return the raw JSON body.

        Error responses with a JSON body are returned as-is so the backend's
        message reaches the decoder.

        Raises:
            TransportFailure: the request failed or the server answered with a
                non-JSON error.
        """
        headers = httpx.Headers(self.headers)
        if self.credentials is not None:
            headers["Authorization"] = await self.credentials.authorization()

        log.debug("GET %s/api/v1/query query=%r", self.base_url, promql)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(
                    f"{self.base_url}/api/v1/query",
                    params={"query": promql},
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            raise TransportFailure(f"request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__) from e

        log.debug("HTTP %d, %d bytes", resp.status_code, len(resp.content))
        if resp.is_error and "json" not in resp.headers.get("content-type", ""):
            raise TransportFailure(
                f"HTTP {resp.status_code} {resp.reason_phrase}".rstrip(),
                status_code=resp.status_code,
            )
        return resp.content
