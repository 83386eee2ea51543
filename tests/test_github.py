"""Tests for the GitHub change source and comment sink."""

import json

import httpx
import pytest
from patchnote.models import Finding, FindingOutcome, Side
from patchnote.publisher import PublishSession
from patchnote.sources.base import (
  ChangeSetClosed,
  ChangeSetNotFound,
  SinkRejected,
  SinkTransientError,
  SourceUnavailable,
)
from patchnote.sources.github import GitHubClient

PULL = {
  "state": "open",
  "title": "Add feature",
  "html_url": "https://github.com/acme/app/pull/7",
  "head": {"sha": "abc123"},
}

FILES = [
  {"filename": "A.txt", "patch": "@@ -1,2 +1,3 @@\n line1\n+TODO line2\n line3", "additions": 1, "deletions": 0},
  {"filename": "logo.png", "additions": 0, "deletions": 0},
]


def _client(handler, **kwargs) -> GitHubClient:
  return GitHubClient("acme/app", token="t0ken", transport=httpx.MockTransport(handler), **kwargs)


def _read_handler(pull=PULL, files=FILES):
  def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/repos/acme/app/pulls/7":
      return httpx.Response(200, json=pull)
    if request.url.path == "/repos/acme/app/pulls/7/files":
      return httpx.Response(200, json=files)
    return httpx.Response(404, json={"message": "Not Found"})
  return handler


class TestFetch:
  def test_fetch_change_set(self) -> None:
    with _client(_read_handler()) as client:
      change_set = client.fetch("7")

    assert change_set.id == "7"
    assert change_set.head == "abc123"
    assert change_set.title == "Add feature"
    assert change_set.url == "https://github.com/acme/app/pull/7"
    assert [f.path for f in change_set.files] == ["A.txt", "logo.png"]
    assert change_set.files[0].additions == 1
    assert change_set.files[1].patch == ""

  def test_sends_auth_header(self) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
      seen.append(request.headers.get("authorization"))
      return _read_handler()(request)

    with _client(handler) as client:
      client.head_revision("7")

    assert seen == ["Bearer t0ken"]

  def test_not_found(self) -> None:
    with _client(_read_handler()) as client:
      with pytest.raises(ChangeSetNotFound):
        client.fetch("8")

  def test_closed(self) -> None:
    with _client(_read_handler(pull={**PULL, "state": "closed"})) as client:
      with pytest.raises(ChangeSetClosed):
        client.fetch("7")

  def test_paginates_files(self) -> None:
    pages = {
      "1": [{"filename": f"f{i}.py", "patch": ""} for i in range(100)],
      "2": [{"filename": "last.py", "patch": ""}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
      if request.url.path.endswith("/files"):
        return httpx.Response(200, json=pages[request.url.params["page"]])
      return httpx.Response(200, json=PULL)

    with _client(handler) as client:
      change_set = client.fetch("7")

    assert len(change_set.files) == 101
    assert change_set.files[-1].path == "last.py"

  def test_retries_server_errors(self) -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
      attempts.append(request.url.path)
      if len(attempts) == 1:
        return httpx.Response(502)
      return httpx.Response(200, json=PULL)

    with _client(handler, max_retries=2) as client:
      assert client.head_revision("7") == "abc123"
    assert len(attempts) == 2

  def test_unavailable_after_retries(self) -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
      attempts.append(1)
      raise httpx.ConnectError("connection refused")

    with _client(handler, max_retries=1) as client:
      with pytest.raises(SourceUnavailable):
        client.fetch("7")
    assert len(attempts) == 2

  def test_unexpected_read_status(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      return httpx.Response(401, json={"message": "Bad credentials"})

    with _client(handler) as client:
      with pytest.raises(SourceUnavailable, match="Bad credentials"):
        client.fetch("7")


class TestCommentSink:
  def test_post_comment(self) -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
      requests.append(request)
      return httpx.Response(201, json={"id": 1})

    with _client(handler) as client:
      client.comment_sink("7").post("abc123", "A.txt", 2, "Resolve TODO", side=Side.RIGHT)

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/repos/acme/app/pulls/7/comments"
    assert json.loads(requests[0].content) == {
      "body": "Resolve TODO",
      "commit_id": "abc123",
      "path": "A.txt",
      "line": 2,
      "side": "RIGHT",
    }

  def test_unprocessable_is_rejected(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      return httpx.Response(422, json={
        "message": "Validation Failed",
        "errors": ["line must be part of the diff"],
      })

    with _client(handler) as client:
      with pytest.raises(SinkRejected) as exc_info:
        client.comment_sink("7").post("abc123", "A.txt", 99, "x")

    assert "422" in exc_info.value.reason
    assert "line must be part of the diff" in exc_info.value.reason

  @pytest.mark.parametrize("status, headers", [
    (429, {}),
    (500, {}),
    (503, {}),
    (403, {"x-ratelimit-remaining": "0"}),
  ])
  def test_transient_statuses(self, status: int, headers: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      return httpx.Response(status, headers=headers, json={"message": "slow down"})

    with _client(handler) as client:
      with pytest.raises(SinkTransientError):
        client.comment_sink("7").post("abc123", "A.txt", 2, "x")

  def test_forbidden_is_rejected(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      return httpx.Response(403, json={"message": "Resource not accessible"})

    with _client(handler) as client:
      with pytest.raises(SinkRejected):
        client.comment_sink("7").post("abc123", "A.txt", 2, "x")

  def test_post_is_not_retried(self) -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
      attempts.append(1)
      return httpx.Response(502)

    with _client(handler, max_retries=3) as client:
      with pytest.raises(SinkTransientError):
        client.comment_sink("7").post("abc123", "A.txt", 2, "x")
    assert len(attempts) == 1

  def test_transport_error_is_transient(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      raise httpx.ReadTimeout("timed out")

    with _client(handler) as client:
      with pytest.raises(SinkTransientError):
        client.comment_sink("7").post("abc123", "A.txt", 2, "x")


  def test_redirect_loop_is_transient(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.")

    with _client(handler) as client:
      with pytest.raises(SinkTransientError):
        client.comment_sink("7").post("abc123", "A.txt", 2, "x")

  def test_request_error_does_not_stop_session(self) -> None:
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
      body = json.loads(request.content)
      if body["line"] == 1:
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.")
      posted.append(body["line"])
      return httpx.Response(201, json={"id": 2})

    first = Finding(file_path="A.txt", line=1, message="one", rule_id="T001")
    second = Finding(file_path="A.txt", line=2, message="two", rule_id="T001")
    first.approve()
    second.approve()

    with _client(handler) as client:
      session = PublishSession("7", "abc123", client.comment_sink("7"))
      assert session.publish(first) == FindingOutcome.FAILED
      assert session.publish(second) == FindingOutcome.POSTED

    assert posted == [2]
    assert session.tally.retryable == 1

  def test_read_request_error_is_unavailable(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.")

    with _client(handler, max_retries=0) as client:
      with pytest.raises(SourceUnavailable):
        client.fetch("7")


class TestFromEnv:
  def test_token_from_environment(self, monkeypatch) -> None:
    monkeypatch.setenv("MY_TOKEN", "secret")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
      seen.append(request.headers.get("authorization"))
      return httpx.Response(200, json=PULL)

    with GitHubClient.from_env(
      "acme/app", token_env="MY_TOKEN", transport=httpx.MockTransport(handler)
    ) as client:
      client.head_revision("7")

    assert seen == ["Bearer secret"]
