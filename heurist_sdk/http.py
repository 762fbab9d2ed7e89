"""JSON-over-POST helpers shared by the workflow and image resources."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import APIError

logger = logging.getLogger(__name__)


def new_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json"})
    return session


def error_type_for(status_code: int) -> str:
    return "server_error" if status_code >= 500 else "client_error"


def api_error_from_response(response: requests.Response, endpoint: Optional[str] = None) -> APIError:
    """Build an ``APIError`` from a non-2xx response.

    JSON bodies contribute their ``message`` (or ``error``) field; anything
    else contributes the raw body text.
    """

    content_type = response.headers.get("content-type", "")
    message: Optional[str] = None
    if "application/json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or "Unknown error"
    if message is None:
        message = response.text or "Unknown error"
    return APIError(
        str(message),
        status_code=response.status_code,
        error_type=error_type_for(response.status_code),
        endpoint=endpoint,
    )


def post_json(
    session: requests.Session,
    url: str,
    payload: Mapping[str, Any],
    *,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
    endpoint: Optional[str] = None,
) -> requests.Response:
    """POST ``payload`` and return the response, raising ``APIError`` on failure."""

    label = endpoint or url
    try:
        resp = session.post(url, json=dict(payload), headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("%s request failed: %s", label, exc)
        raise APIError(str(exc), error_type="network_error", endpoint=endpoint) from exc
    if not resp.ok:
        error = api_error_from_response(resp, endpoint)
        logger.warning("%s responded with HTTP %s: %s", label, resp.status_code, error.message)
        raise error
    return resp


def response_json(resp: requests.Response, endpoint: Optional[str] = None) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as exc:
        raise APIError(
            f"Invalid JSON in response: {exc}",
            status_code=resp.status_code,
            error_type="decode_error",
            endpoint=endpoint,
        ) from exc
    if not isinstance(data, dict):
        raise APIError(
            "Expected a JSON object in response",
            status_code=resp.status_code,
            error_type="decode_error",
            endpoint=endpoint,
        )
    return data


__all__ = ["api_error_from_response", "error_type_for", "new_session", "post_json", "response_json"]
