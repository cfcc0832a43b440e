"""Download and split GitHub pull request patches."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import httpx

from coreview.errors import DiffSourceError

from .types import DiffSource

logger = logging.getLogger(__name__)

PATCH_URL = "https://patch-diff.githubusercontent.com/raw/{org}/{repo}/pull/{number}.patch"
REQUEST_TIMEOUT_SEC = 30.0

_PR_URL_RE = re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/pull/(\d+)")
_PATCH_PREFIX_RE = re.compile(r"^\[PATCH[^\]]*\]\s*")
# mbox separator line that git format-patch puts before every commit
_MBOX_FROM_MARKER = " Mon Sep 17 00:00:00 2001"
# "-- " then the git version closes every commit of a format-patch series
_SIGNATURE_SEPARATOR = "-- "
_GIT_VERSION_RE = re.compile(r"^\d+(\.\d+)+")


@dataclass(frozen=True)
class PullRequest:
    org: str
    repo: str
    number: int

    @property
    def patch_url(self) -> str:
        return PATCH_URL.format(org=self.org, repo=self.repo, number=self.number)

    def __str__(self) -> str:
        return f"{self.org}/{self.repo}#{self.number}"


def parse_pr_url(url: str) -> Optional[PullRequest]:
    """Return the pull request named by a ``github.com/<org>/<repo>/pull/<n>`` URL."""
    m = _PR_URL_RE.match(url.strip())
    if not m:
        return None
    return PullRequest(org=m.group(1), repo=m.group(2), number=int(m.group(3)))


def parse_patch(patch: str) -> DiffSource:
    """Split a format-patch series into commit subjects and the combined diff."""
    commit_messages: List[str] = []
    diff_lines: List[str] = []
    in_diff = False

    lines = patch.split("\n")
    for i, line in enumerate(lines):
        if line.startswith("From ") and _MBOX_FROM_MARKER in line:
            in_diff = False
            continue

        next_line = lines[i + 1] if i + 1 < len(lines) else ""
        if in_diff and line == _SIGNATURE_SEPARATOR and _GIT_VERSION_RE.match(next_line):
            in_diff = False
            continue

        if not in_diff and line.startswith("Subject: "):
            subject = _PATCH_PREFIX_RE.sub("", line[len("Subject: ") :]).strip()
            if subject:
                commit_messages.append(subject)
            continue

        if line.startswith("diff --git "):
            in_diff = True

        if in_diff:
            diff_lines.append(line)

    return DiffSource(diff="\n".join(diff_lines), commit_messages=commit_messages)


def fetch_pr_patch(pr: PullRequest, token: Optional[str] = None, client: Optional[httpx.Client] = None) -> str:
    """Download the patch text of *pr*.

    Raises:
        DiffSourceError: On a missing PR, an auth failure or any HTTP error
    """
    headers = {"Authorization": f"token {token}"} if token else {}
    logger.info(f"Fetching {pr.patch_url}")

    owns_client = client is None
    client = client or httpx.Client(timeout=REQUEST_TIMEOUT_SEC, follow_redirects=True)
    try:
        response = client.get(pr.patch_url, headers=headers)
    except httpx.HTTPError as e:
        raise DiffSourceError(f"Failed to fetch PR patch: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.status_code == 404:
        raise DiffSourceError(f"PR not found: {pr}")
    if response.status_code in (401, 403):
        raise DiffSourceError("Auth required for private repo. Set GITHUB_TOKEN env var.")
    if response.is_error:
        raise DiffSourceError(
            f"Failed to fetch PR patch: {response.status_code} {response.reason_phrase}"
        )
    return response.text


def read_pr_diff(url: str, token: Optional[str] = None, client: Optional[httpx.Client] = None) -> DiffSource:
    pr = parse_pr_url(url)
    if pr is None:
        raise DiffSourceError(f"Not a GitHub pull request URL: {url}")
    return parse_patch(fetch_pr_patch(pr, token=token, client=client))
