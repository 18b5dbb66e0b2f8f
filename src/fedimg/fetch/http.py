"""Plain HTTP GET used to retrieve repository definition files."""

from __future__ import annotations

from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from fedimg.errors import FetchError
from fedimg.policy import Policy, ensure_network_allowed


def http_get(url: str, *, policy: Policy | None = None) -> bytes:
    """Return the body at ``url``; any non-200 status or transport error raises."""
    timeout = None
    if policy is not None:
        ensure_network_allowed(policy=policy, operation="http_get")
        timeout = policy.fetch_timeout
    try:
        with urlopen(url, timeout=timeout) as response:  # noqa: S310
            # Non-HTTP schemes (file://) report no status.
            status = getattr(response, "status", None)
            if status is not None and status != 200:
                raise FetchError(
                    f"Bad status for url '{url}'.",
                    context={"operation": "http_get", "url": url, "status": str(status)},
                )
            return response.read()
    except HTTPError as exc:
        raise FetchError(
            f"Bad status for url '{url}'.",
            context={"operation": "http_get", "url": url, "status": str(exc.code)},
        ) from exc
    except ValueError as exc:
        # urllib rejects scheme-less and malformed URLs before any I/O.
        raise FetchError(
            f"Invalid url '{url}'.",
            hint="Repository URLs need an http:// or https:// scheme.",
            context={"operation": "http_get", "url": url, "error": str(exc)},
        ) from exc
    except (URLError, HTTPException, OSError) as exc:
        raise FetchError(
            f"Error getting url '{url}'.",
            hint="Check the URL and network connectivity.",
            context={"operation": "http_get", "url": url, "error": str(exc)},
        ) from exc
