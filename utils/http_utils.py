import os
from typing import Optional

import requests
from loguru import logger

from utils.error_utils import UpstreamFetchError

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _timeout_from_env() -> Optional[float]:
    raw = os.getenv("FETCH_TIMEOUT_SECONDS")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric FETCH_TIMEOUT_SECONDS={!r}", raw)
        return None


def fetch_markup(url: str, timeout: Optional[float] = None) -> str:
    """
    GET ``url`` once and return the response body.

    Sends a fixed browser User-Agent. No retries; by default no timeout
    either (set FETCH_TIMEOUT_SECONDS to bound the wait). Raises
    UpstreamFetchError when the site is unreachable or answers non-2xx.
    """
    if timeout is None:
        timeout = _timeout_from_env()
    headers = {"User-Agent": os.getenv("FETCH_USER_AGENT", DEFAULT_USER_AGENT)}

    logger.debug("HTTP fetch for {}", url)
    try:
        resp = requests.get(url, timeout=timeout, headers=headers)
    except requests.RequestException as exc:
        logger.error("HTTP fetch error for {}: {}", url, exc)
        raise UpstreamFetchError(f"Failed to fetch {url}: {exc}") from exc

    if not 200 <= resp.status_code < 300:
        logger.error("HTTP fetch for {} returned {} {}", url, resp.status_code, resp.reason)
        raise UpstreamFetchError(
            f"HTTP {resp.status_code}: {resp.reason}",
            status_code=resp.status_code,
        )

    # requests assumes ISO-8859-1 for text/* without a charset
    content_type = resp.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        resp.encoding = "utf-8"
    return resp.text
