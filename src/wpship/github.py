# github.py
from __future__ import annotations

import json
import mimetypes
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urljoin

from pydantic import BaseModel, Field


GITHUB_API = "https://api.github.com"


class APIError(Exception):
    """Raised when a remote API request fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


# -------------------- Schemas --------------------

class Release(BaseModel):
    id: int
    html_url: str = ""
    upload_url: str = ""
    tag_name: str


class Issue(BaseModel):
    number: int
    title: str
    html_url: str = ""
    # the issues endpoint also returns pull requests
    pull_request: Optional[dict[str, Any]] = Field(default=None)


class Asset(BaseModel):
    id: int
    name: str
    browser_download_url: str = ""


# -------------------- Transport --------------------

def request_json(
    method: str,
    url: str,
    *,
    data: Optional[dict] = None,
    body: Optional[bytes] = None,
    headers: Optional[dict] = None,
    timeout: float = 60,
) -> Any:
    """
    Make an HTTP request and decode the JSON response.

    Raises:
        APIError: on HTTP errors, network errors or an undecodable body
    """
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)

    req_data = body
    if data is not None:
        req_data = json.dumps(data).encode("utf-8")
        req_headers.setdefault("Content-Type", "application/json")

    req = urllib.request.Request(url, data=req_data, headers=req_headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            response_data = response.read().decode("utf-8")
            if response_data:
                return json.loads(response_data)
            return {}
    except urllib.error.HTTPError as e:
        error_body = e.read().decode("utf-8") if e.fp else ""
        raise APIError(f"{method} {url} failed: {e.code} {e.reason}. {error_body}".strip(), status=e.code)
    except urllib.error.URLError as e:
        raise APIError(f"{method} {url} failed: {e.reason}")
    except json.JSONDecodeError as e:
        raise APIError(f"{method} {url} returned invalid JSON: {e}")


# -------------------- Client --------------------

class GitHubClient:
    """Minimal GitHub REST client for releases and issues."""

    def __init__(self, token: str, base_url: str = GITHUB_API):
        self.token = token
        self.base_url = base_url.rstrip("/")

    def _headers(self) -> dict:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        return request_json(method, url, data=data, headers=self._headers())

    def create_release(
        self,
        owner: str,
        repo: str,
        tag: str,
        *,
        name: Optional[str] = None,
        body: str = "",
        prerelease: bool = False,
    ) -> Release:
        payload = {
            "tag_name": tag,
            "name": name or tag,
            "body": body,
            "prerelease": prerelease,
        }
        return Release.model_validate(self._request("POST", f"/repos/{owner}/{repo}/releases", payload))

    def upload_asset(self, release: Release, path: str | Path) -> Asset:
        """Attach a file to a release via its upload_url template."""
        p = Path(path)
        # upload_url looks like https://uploads.github.com/.../assets{?name,label}
        base = release.upload_url.split("{", 1)[0]
        url = f"{base}?{urllib.parse.urlencode({'name': p.name})}"
        content_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        headers = self._headers()
        headers["Content-Type"] = content_type
        result = request_json("POST", url, body=p.read_bytes(), headers=headers, timeout=300)
        return Asset.model_validate(result)

    def list_open_issues(self, owner: str, repo: str) -> List[Issue]:
        data = self._request("GET", f"/repos/{owner}/{repo}/issues?state=open&per_page=100")
        return [Issue.model_validate(i) for i in data]

    def find_issue(self, owner: str, repo: str, title: str) -> Optional[Issue]:
        """First open issue (not PR) whose title matches exactly, ignoring case."""
        wanted = title.strip().lower()
        for issue in self.list_open_issues(owner, repo):
            if issue.pull_request is None and issue.title.strip().lower() == wanted:
                return issue
        return None

    def create_issue(self, owner: str, repo: str, title: str, body: str = "") -> Issue:
        return Issue.model_validate(
            self._request("POST", f"/repos/{owner}/{repo}/issues", {"title": title, "body": body})
        )
