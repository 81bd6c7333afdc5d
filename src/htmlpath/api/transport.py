"""HTTP transport for fetching markup.

The response body is streamed and decoded incrementally so the tokenizer can
start working before the download finishes. Every failure of the request,
including a non-2xx status or a connection dropped mid-body, is raised as
``TransportError``; it is never reported as an empty document.
"""

import codecs
from typing import Iterator, Optional

import requests

from htmlpath.shared.config import FetchConfig
from htmlpath.shared.errors import HTMLPathError
from htmlpath.shared.logging import get_logger

DEFAULT_ENCODING = "utf-8"

logger = get_logger(__name__, component="transport")


class TransportError(HTMLPathError):
    """Fetching markup from a remote location failed."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.message} ({self.url})"


def _response_encoding(response: requests.Response, config: FetchConfig) -> str:
    if config.encoding:
        return config.encoding
    # requests falls back to ISO-8859-1 for text/* without a charset
    content_type = response.headers.get("Content-Type", "")
    if "charset" in content_type.lower() and response.encoding:
        return response.encoding
    return DEFAULT_ENCODING


def _decoder_for(encoding: str, url: str) -> "codecs.IncrementalDecoder":
    try:
        return codecs.getincrementaldecoder(encoding)(errors="replace")
    except LookupError:
        logger.warning(
            "Unknown response encoding, decoding as utf-8",
            extra={"url": url, "encoding": encoding},
        )
        return codecs.getincrementaldecoder(DEFAULT_ENCODING)(errors="replace")


def open_response(
    url: str,
    config: FetchConfig,
    session: requests.Session
) -> requests.Response:
    """Send the GET request and return the response with its body unread.

    Raises:
        TransportError: If the request fails or the status is not 2xx
    """
    try:
        response = session.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.timeout_seconds,
            verify=config.verify_tls,
            stream=True,
        )
    except requests.RequestException as e:
        logger.warning("Request failed", extra={"url": url, "error": str(e)})
        raise TransportError(url, f"Request failed: {e}") from e

    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        response.close()
        logger.warning(
            "Request returned error status",
            extra={"url": url, "status_code": response.status_code},
        )
        raise TransportError(
            url, f"HTTP {response.status_code}", status_code=response.status_code
        ) from e
    return response


def fetch_chunks(
    url: str,
    config: Optional[FetchConfig] = None,
    session: Optional[requests.Session] = None
) -> Iterator[str]:
    """Fetch ``url`` and return an iterator over its decoded body.

    The request is sent immediately so connection and status errors surface
    from this call; errors while reading the body surface from the iterator.
    A session created here is closed once the body has been read.

    Args:
        url: Address of the document
        config: Fetch configuration (defaults to ``FetchConfig()``)
        session: Optional session to reuse connections and settings

    Raises:
        TransportError: If the request fails
    """
    config = config or FetchConfig()
    owned_session = session is None
    active_session = session or requests.Session()
    try:
        response = open_response(url, config, active_session)
    except TransportError:
        if owned_session:
            active_session.close()
        raise
    return _iter_body(url, response, config, active_session if owned_session else None)


def _iter_body(
    url: str,
    response: requests.Response,
    config: FetchConfig,
    owned_session: Optional[requests.Session]
) -> Iterator[str]:
    decoder = _decoder_for(_response_encoding(response, config), url)
    received = 0
    try:
        for chunk in response.iter_content(chunk_size=config.chunk_size):
            received += len(chunk)
            text = decoder.decode(chunk)
            if text:
                yield text
        tail = decoder.decode(b"", final=True)
        if tail:
            yield tail
    except requests.RequestException as e:
        logger.warning(
            "Response body interrupted",
            extra={"url": url, "bytes_received": received, "error": str(e)},
        )
        raise TransportError(url, f"Reading response failed: {e}") from e
    finally:
        response.close()
        if owned_session is not None:
            owned_session.close()

    logger.debug("Response body read", extra={"url": url, "bytes_received": received})
