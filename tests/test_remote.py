from __future__ import annotations

import io
import json
import urllib.error
from pathlib import Path

import pytest

import wpship.github as github_mod
import wpship.versions as versions_mod
from wpship.errors import BestEffortWarning
from wpship.github import APIError, GitHubClient, Release
from wpship.trello import TrelloClient


class FakeResponse:
    def __init__(self, payload):
        if isinstance(payload, bytes):
            self._body = payload
        else:
            self._body = json.dumps(payload).encode("utf-8") if payload is not None else b""

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch):
    """Queue of canned responses; records (method, url, headers, body) per request."""
    state = {"responses": [], "requests": []}

    def fake_urlopen(req, timeout=None):
        state["requests"].append((req.get_method(), req.full_url, dict(req.header_items()), req.data))
        response = state["responses"].pop(0)
        if isinstance(response, Exception):
            raise response
        return FakeResponse(response)

    monkeypatch.setattr(github_mod.urllib.request, "urlopen", fake_urlopen)
    return state


# -------------------- versions --------------------

def test_fetch_latest_wp_version_reads_first_offer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(versions_mod, "_get_json", lambda url: {"offers": [{"version": "6.4.2"}, {"version": "6.3"}]})

    assert versions_mod.fetch_latest_wp_version() == "6.4.2"


def test_fetch_latest_wc_version(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(versions_mod, "_get_json", lambda url: {"name": "WooCommerce", "version": "8.5.1"})

    assert versions_mod.fetch_latest_wc_version() == "8.5.1"


@pytest.mark.parametrize(
    "failure",
    [
        urllib.error.URLError("no network"),
        json.JSONDecodeError("bad", "doc", 0),
    ],
)
def test_fetch_failures_become_best_effort_warnings(monkeypatch: pytest.MonkeyPatch, failure: Exception) -> None:
    def boom(url):
        raise failure

    monkeypatch.setattr(versions_mod, "_get_json", boom)

    with pytest.raises(BestEffortWarning, match="Could not fetch latest WordPress version"):
        versions_mod.fetch_latest_wp_version()


def test_undecodable_body_is_a_best_effort_warning(http) -> None:
    http["responses"].append(b"\xff\xfe<html>")

    with pytest.raises(BestEffortWarning, match="Could not fetch latest WooCommerce version"):
        versions_mod.fetch_latest_wc_version()


def test_unexpected_payload_is_a_best_effort_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(versions_mod, "_get_json", lambda url: {"offers": "nope"})

    with pytest.raises(BestEffortWarning):
        versions_mod.fetch_latest_wp_version()


# -------------------- github --------------------

def test_create_release_posts_tag_and_parses_release(http) -> None:
    http["responses"].append({
        "id": 7,
        "tag_name": "1.2.0",
        "html_url": "https://github.com/acme/x/releases/7",
        "upload_url": "https://uploads.github.com/repos/acme/x/releases/7/assets{?name,label}",
    })

    release = GitHubClient("secret").create_release("acme", "x", "1.2.0", name="X 1.2.0")

    method, url, headers, body = http["requests"][0]
    assert (method, url) == ("POST", "https://api.github.com/repos/acme/x/releases")
    assert headers["Authorization"] == "token secret"
    assert json.loads(body) == {"tag_name": "1.2.0", "name": "X 1.2.0", "body": "", "prerelease": False}
    assert release.id == 7


def test_upload_asset_uses_upload_url_template(http, tmp_path: Path) -> None:
    zip_path = tmp_path / "x.1.2.0.zip"
    zip_path.write_bytes(b"PK")
    http["responses"].append({"id": 1, "name": "x.1.2.0.zip"})
    release = Release(
        id=7, tag_name="1.2.0",
        upload_url="https://uploads.github.com/repos/acme/x/releases/7/assets{?name,label}",
    )

    asset = GitHubClient("secret").upload_asset(release, zip_path)

    method, url, headers, body = http["requests"][0]
    assert url == "https://uploads.github.com/repos/acme/x/releases/7/assets?name=x.1.2.0.zip"
    assert headers["Content-type"] == "application/zip"
    assert body == b"PK"
    assert asset.name == "x.1.2.0.zip"


def test_find_issue_skips_pull_requests(http) -> None:
    http["responses"].append([
        {"number": 3, "title": "Release 1.2.0", "pull_request": {"url": "..."}},
        {"number": 4, "title": "release 1.2.0 "},
    ])

    issue = GitHubClient("t").find_issue("acme", "x", "Release 1.2.0")

    assert issue is not None and issue.number == 4


def test_http_error_becomes_api_error(http) -> None:
    http["responses"].append(
        urllib.error.HTTPError("https://api.github.com", 422, "Unprocessable", {}, io.BytesIO(b'{"message":"exists"}'))
    )

    with pytest.raises(APIError, match="422 Unprocessable") as excinfo:
        GitHubClient("t").create_issue("acme", "x", "title")
    assert excinfo.value.status == 422


# -------------------- trello --------------------

def test_trello_find_and_comment_card(http) -> None:
    http["responses"] += [
        [{"id": "c1", "name": "Other plugin"}, {"id": "c2", "name": "Example Gateway: 1.2.0", "url": "u"}],
        {},
    ]
    client = TrelloClient("k", "t")

    card = client.find_card("board1", "example gateway")
    client.comment_card(card.id, "Example Gateway 1.2.0 deployed")

    assert card.id == "c2"
    (m1, url1, _, _), (m2, url2, _, _) = http["requests"]
    assert m1 == "GET" and url1.startswith("https://api.trello.com/1/boards/board1/cards?key=k&token=t")
    assert m2 == "POST" and "cards/c2/actions/comments" in url2 and "text=Example+Gateway+1.2.0+deployed" in url2
