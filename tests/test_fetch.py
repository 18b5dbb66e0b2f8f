from http.client import IncompleteRead
from pathlib import Path
from urllib.error import HTTPError, URLError

import pytest

from fedimg.errors import FetchError, PolicyError
from fedimg.fetch import http_get
from fedimg.policy import Policy


def test_http_get_reads_body(tmp_path: Path) -> None:
    source = tmp_path / "tailscale.repo"
    source.write_bytes(b"[tailscale-stable]\nname=Tailscale stable\n")

    assert http_get(source.as_uri()) == b"[tailscale-stable]\nname=Tailscale stable\n"


def test_http_get_rejects_non_200_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "fedimg.fetch.http.urlopen",
        lambda url, timeout=None: _FakeResponse(status=204),
    )

    with pytest.raises(FetchError) as excinfo:
        http_get("https://example.com/a.repo")

    assert excinfo.value.context["status"] == "204"


def test_http_get_wraps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def raise_404(url: str, timeout: float | None = None) -> None:
        raise HTTPError(url, 404, "Not Found", hdrs=None, fp=None)  # type: ignore[arg-type]

    monkeypatch.setattr("fedimg.fetch.http.urlopen", raise_404)

    with pytest.raises(FetchError) as excinfo:
        http_get("https://example.com/missing.repo")

    assert excinfo.value.code == "E_FETCH"
    assert excinfo.value.context["status"] == "404"
    assert excinfo.value.context["url"] == "https://example.com/missing.repo"


def test_http_get_wraps_transport_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def unreachable(url: str, timeout: float | None = None) -> None:
        raise URLError("connection refused")

    monkeypatch.setattr("fedimg.fetch.http.urlopen", unreachable)

    with pytest.raises(FetchError) as excinfo:
        http_get("https://example.com/a.repo")

    assert "connection refused" in excinfo.value.context["error"]
    assert excinfo.value.hint is not None


def test_http_get_rejects_scheme_less_url() -> None:
    with pytest.raises(FetchError) as excinfo:
        http_get("example.com/tailscale.repo")

    assert excinfo.value.context["url"] == "example.com/tailscale.repo"
    assert "unknown url type" in excinfo.value.context["error"]
    assert "scheme" in (excinfo.value.hint or "")


def test_http_get_wraps_truncated_body(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "fedimg.fetch.http.urlopen",
        lambda url, timeout=None: _FakeResponse(status=200, error=IncompleteRead(b"[a")),
    )

    with pytest.raises(FetchError) as excinfo:
        http_get("https://example.com/a.repo")

    assert excinfo.value.context["url"] == "https://example.com/a.repo"


def test_http_get_passes_policy_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[float | None] = []

    def fake_urlopen(url: str, timeout: float | None = None) -> "_FakeResponse":
        seen.append(timeout)
        return _FakeResponse(status=200, body=b"ok")

    monkeypatch.setattr("fedimg.fetch.http.urlopen", fake_urlopen)

    assert http_get("https://example.com/a.repo", policy=Policy(fetch_timeout=5.0)) == b"ok"
    assert seen == [5.0]


def test_http_get_blocked_offline(tmp_path: Path) -> None:
    source = tmp_path / "a.repo"
    source.write_bytes(b"[a]\n")

    with pytest.raises(PolicyError):
        http_get(source.as_uri(), policy=Policy(network_mode="offline"))


class _FakeResponse:
    def __init__(
        self,
        *,
        status: int,
        body: bytes = b"",
        error: Exception | None = None,
    ) -> None:
        self.status = status
        self.body = body
        self.error = error

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def read(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.body
