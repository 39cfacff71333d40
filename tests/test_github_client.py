"""Tests for the GitHub REST client."""

import base64
import json

import httpx
import pytest

from ghrun.core.config import GitHubConfig
from ghrun.core.exceptions import BranchAlreadyExistsError, RemoteAPIError
from ghrun.core.github import GitHubClient

REPO = "/repos/octo/demo"


def make_client(handler) -> GitHubClient:
    config = GitHubConfig(owner="octo", repo="demo", token="ghp_test")
    http = httpx.AsyncClient(
        base_url="https://api.github.com",
        transport=httpx.MockTransport(handler),
    )
    return GitHubClient(config, http_client=http)


async def test_get_default_branch():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == REPO
        return httpx.Response(200, json={"default_branch": "trunk", "private": True})

    async with make_client(handler) as client:
        assert await client.get_default_branch() == "trunk"


async def test_get_branch_head_sha():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"{REPO}/git/ref/heads/main"
        return httpx.Response(200, json={"ref": "refs/heads/main", "object": {"sha": "deadbeef"}})

    async with make_client(handler) as client:
        assert await client.get_branch_head_sha("main") == "deadbeef"


async def test_create_branch_posts_ref():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={})

    async with make_client(handler) as client:
        await client.create_branch("ghrun-workflow-1", "deadbeef")

    assert seen["path"] == f"{REPO}/git/refs"
    assert seen["body"] == {"ref": "refs/heads/ghrun-workflow-1", "sha": "deadbeef"}


async def test_create_branch_collision():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Reference already exists"})

    async with make_client(handler) as client:
        with pytest.raises(BranchAlreadyExistsError) as exc_info:
            await client.create_branch("taken", "deadbeef")

    assert exc_info.value.branch == "taken"
    assert exc_info.value.status_code == 422


async def test_create_branch_other_422_is_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Object does not exist"})

    async with make_client(handler) as client:
        with pytest.raises(RemoteAPIError) as exc_info:
            await client.create_branch("new", "bad")

    assert not isinstance(exc_info.value, BranchAlreadyExistsError)


async def test_put_file_creates_new_file():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(201, json={})

    async with make_client(handler) as client:
        await client.put_file(".github/workflows/x.yml", "on: push\n", "b1", "Add workflow")

    get, put = requests
    assert get.url.params["ref"] == "b1"
    assert put.method == "PUT"
    assert put.url.path == f"{REPO}/contents/.github/workflows/x.yml"
    body = json.loads(put.content)
    assert base64.b64decode(body["content"]).decode() == "on: push\n"
    assert body["branch"] == "b1"
    assert body["message"] == "Add workflow"
    assert "sha" not in body


async def test_put_file_overwrites_existing_file():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"sha": "blob123"})
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    async with make_client(handler) as client:
        await client.put_file("x.yml", "on: push\n", "b1", "Update")

    assert bodies[0]["sha"] == "blob123"


async def test_list_runs_for_branch():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"{REPO}/actions/runs"
        assert request.url.params["branch"] == "b1"
        assert request.url.params["per_page"] == "1"
        return httpx.Response(
            200,
            json={
                "total_count": 1,
                "workflow_runs": [
                    {"id": 7, "status": "queued", "conclusion": None, "html_url": "u"}
                ],
            },
        )

    async with make_client(handler) as client:
        runs = await client.list_runs_for_branch("b1", limit=1)

    assert [run.id for run in runs] == [7]
    assert runs[0].status == "queued"


async def test_get_run_and_jobs():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/jobs"):
            return httpx.Response(
                200,
                json={
                    "total_count": 1,
                    "jobs": [
                        {
                            "name": "build",
                            "status": "completed",
                            "conclusion": "success",
                            "started_at": "2024-05-01T10:00:00Z",
                            "completed_at": "2024-05-01T10:01:00Z",
                            "html_url": "https://github.com/octo/demo/actions/runs/7/job/1",
                        }
                    ],
                },
            )
        return httpx.Response(
            200,
            json={
                "id": 7,
                "status": "completed",
                "conclusion": "success",
                "html_url": "https://github.com/octo/demo/actions/runs/7",
                "created_at": "2024-05-01T09:59:00Z",
                "updated_at": "2024-05-01T10:01:30Z",
            },
        )

    async with make_client(handler) as client:
        run = await client.get_run(7)
        jobs = await client.list_jobs_for_run(7)

    assert run.status == "completed"
    assert run.created_at.year == 2024
    assert jobs[0].name == "build"
    assert jobs[0].conclusion == "success"


async def test_delete_branch():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(204)

    async with make_client(handler) as client:
        await client.delete_branch("feature/x")

    assert seen == {"method": "DELETE", "path": f"{REPO}/git/refs/heads/feature/x"}


async def test_http_error_carries_status_and_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Bad credentials"})

    async with make_client(handler) as client:
        with pytest.raises(RemoteAPIError) as exc_info:
            await client.get_default_branch()

    assert exc_info.value.status_code == 401
    assert exc_info.value.operation == "get-repository"
    assert "Bad credentials" in str(exc_info.value)


async def test_transport_error_is_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(RemoteAPIError) as exc_info:
            await client.get_default_branch()

    assert exc_info.value.status_code is None


@pytest.mark.parametrize(
    "call, response",
    [
        (lambda c: c.get_default_branch(), httpx.Response(200, text="<html>maintenance</html>")),
        (lambda c: c.get_branch_head_sha("main"), httpx.Response(200, json={"ref": "main"})),
        (lambda c: c.list_runs_for_branch("b"), httpx.Response(200, json={"workflow_runs": [{}]})),
        (lambda c: c.get_run(7), httpx.Response(200, json={"id": "not-a-number"})),
        (lambda c: c.list_jobs_for_run(7), httpx.Response(200, json=["unexpected"])),
    ],
    ids=["non-json", "missing-sha", "run-without-id", "bad-run-id", "jobs-not-object"],
)
async def test_malformed_success_body_is_remote_error(call, response):
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    async with make_client(handler) as client:
        with pytest.raises(RemoteAPIError, match="Unexpected response body") as exc_info:
            await call(client)

    assert exc_info.value.status_code == 200


async def test_default_client_sends_auth_headers():
    client = GitHubClient(GitHubConfig(owner="octo", repo="demo", token="ghp_secret"))
    try:
        assert client._http.headers["Authorization"] == "Bearer ghp_secret"
        assert client._http.headers["Accept"] == "application/vnd.github+json"
    finally:
        await client.aclose()
