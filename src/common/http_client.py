"""Shared HTTP helpers used by the remote tag listing.

Encapsulates request/timeout error handling and DEBUG tracing so API clients
avoid duplicating try/except blocks. Failures are raised as ``HttpRequestError``
and never retried: the caller decides whether a failure is fatal.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class HttpRequestError(Exception):
    """The request could not be completed (timeout, DNS, connection reset)."""

    def __init__(self, context: str, detail: str):
        self.context = context
        self.detail = detail
        super().__init__(f"{context} request failed: {detail}")


def post_json(
    url: str,
    *,
    context: str,
    payload: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """POST a JSON payload and parse the JSON response with DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "github").
        payload: JSON-serializable request body.
        headers: Optional request headers.
        **kwargs: Passed through to requests.post.

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)

    Raises:
        HttpRequestError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="POST",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.post(
                url,
                json=payload,
                headers=headers,
                timeout=Constants.REQUEST_TIMEOUT,
                **kwargs
            )
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise HttpRequestError(
                context, f"timed out after {Constants.REQUEST_TIMEOUT} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise HttpRequestError(context, str(exc)) from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="POST",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )

    data = None
    if res.text:
        try:
            data = json.loads(res.text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="post_json",
                        outcome="json_decode_error",
                        status_code=res.status_code,
                        target=safe_target
                    )
                )
    return res.status_code, dict(res.headers), data
