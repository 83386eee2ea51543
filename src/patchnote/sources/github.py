"""GitHub pull requests as change source and comment sink."""

import logging
import os
from typing import Any

import httpx

from patchnote.models import ChangedFile, ChangeSet, Side
from patchnote.sources.base import (
  ChangeSetClosed,
  ChangeSetNotFound,
  SinkRejected,
  SinkTransientError,
  SourceUnavailable,
)

logger = logging.getLogger(__name__)


class GitHubClient:
  """GitHub REST client for pull request files and review comments.

  The change id is the pull request number.
  """

  DEFAULT_API_URL = "https://api.github.com"
  PAGE_SIZE = 100

  def __init__(
    self,
    repo: str,
    token: str | None = None,
    api_url: str = DEFAULT_API_URL,
    timeout: float = 10.0,
    max_retries: int = 2,
    transport: httpx.BaseTransport | None = None,
  ):
    self.repo = repo
    self._max_retries = max_retries
    headers = {
      "Accept": "application/vnd.github+json",
      "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
      headers["Authorization"] = f"Bearer {token}"
    self._client = httpx.Client(
      base_url=api_url.rstrip("/"),
      headers=headers,
      timeout=timeout,
      transport=transport,
    )

  @classmethod
  def from_env(cls, repo: str, token_env: str = "GITHUB_TOKEN", **kwargs: Any) -> "GitHubClient":
    return cls(repo, token=os.environ.get(token_env), **kwargs)

  def close(self) -> None:
    self._client.close()

  def __enter__(self) -> "GitHubClient":
    return self

  def __exit__(self, *exc: object) -> None:
    self.close()

  def pull_url(self, change_id: str) -> str:
    return f"https://github.com/{self.repo}/pull/{change_id}"

  def fetch(self, change_id: str) -> ChangeSet:
    pull = self._pull(change_id)
    state = pull.get("state")
    if state != "open":
      raise ChangeSetClosed(f"PR #{change_id} is not open (state: {state})")

    return ChangeSet(
      id=str(change_id),
      head=pull["head"]["sha"],
      files=self._files(change_id),
      title=pull.get("title", ""),
      url=pull.get("html_url") or self.pull_url(change_id),
    )

  def head_revision(self, change_id: str) -> str:
    return self._pull(change_id)["head"]["sha"]

  def comment_sink(self, change_id: str) -> "GitHubCommentSink":
    return GitHubCommentSink(self, change_id)

  def _pull(self, change_id: str) -> dict[str, Any]:
    response = self._get_with_retry(f"/repos/{self.repo}/pulls/{change_id}")
    if response.status_code == 404:
      raise ChangeSetNotFound(f"PR #{change_id} not found in {self.repo}")
    self._raise_for_read(response)
    return response.json()

  def _files(self, change_id: str) -> list[ChangedFile]:
    files: list[ChangedFile] = []
    page = 1
    while True:
      response = self._get_with_retry(
        f"/repos/{self.repo}/pulls/{change_id}/files",
        params={"per_page": self.PAGE_SIZE, "page": page},
      )
      self._raise_for_read(response)
      batch = response.json()
      for item in batch:
        files.append(ChangedFile(
          path=item["filename"],
          patch=item.get("patch") or "",
          additions=item.get("additions", 0),
          deletions=item.get("deletions", 0),
        ))
      if len(batch) < self.PAGE_SIZE:
        return files
      page += 1

  def _get_with_retry(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
    """Make a GET request, retrying request failures and 5xx responses."""
    last_error: str = "no attempt made"

    for attempt in range(self._max_retries + 1):
      try:
        response = self._client.get(path, params=params)
      except httpx.RequestError as e:
        last_error = str(e) or type(e).__name__
      else:
        if response.status_code < 500:
          return response
        last_error = f"HTTP {response.status_code}"
      logger.debug("GET %s failed (attempt %d): %s", path, attempt + 1, last_error)

    raise SourceUnavailable(f"GitHub unavailable for {path}: {last_error}")

  def _raise_for_read(self, response: httpx.Response) -> None:
    if response.status_code == 200:
      return
    raise SourceUnavailable(
      f"GitHub returned {response.status_code} for {response.request.url.path}: "
      f"{_error_message(response)}"
    )

  def create_review_comment(
    self,
    change_id: str,
    revision: str,
    path: str,
    line: int,
    body: str,
    side: Side = Side.RIGHT,
  ) -> None:
    """Post a single review comment. Never retried.

    Raises:
      SinkRejected: GitHub refused the comment.
      SinkTransientError: Rate limiting, server error or request failure.
    """
    try:
      response = self._client.post(
        f"/repos/{self.repo}/pulls/{change_id}/comments",
        json={
          "body": body,
          "commit_id": revision,
          "path": path,
          "line": line,
          "side": side.value,
        },
      )
    except httpx.RequestError as e:
      raise SinkTransientError(str(e) or type(e).__name__) from e

    status = response.status_code
    if status in (200, 201):
      return
    message = _error_message(response)
    if status == 429 or status >= 500 or _rate_limited(response):
      raise SinkTransientError(f"HTTP {status}: {message}")
    raise SinkRejected(f"HTTP {status}: {message}")


class GitHubCommentSink:
  """Comment sink bound to one pull request."""

  def __init__(self, client: GitHubClient, change_id: str):
    self._client = client
    self._change_id = change_id

  def post(
    self,
    revision: str,
    path: str,
    line: int,
    body: str,
    side: Side = Side.RIGHT,
  ) -> None:
    self._client.create_review_comment(self._change_id, revision, path, line, body, side)


def _rate_limited(response: httpx.Response) -> bool:
  return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


def _error_message(response: httpx.Response) -> str:
  try:
    data = response.json()
  except ValueError:
    return response.text[:200]
  if isinstance(data, dict):
    message = data.get("message", "")
    errors = data.get("errors")
    if errors:
      message = f"{message} {errors}"
    return str(message)
  return str(data)[:200]
