from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from src.core.models import NULL_SHA
from src.event_processors.base import ProcessingState
from src.event_processors.push import PushProcessor
from src.integrations.git.workspace import CommitAuthor, GitWorkspace
from src.integrations.github.api import GitHubClient
from src.lint import steps
from src.lint.outcome import LintExecution
from src.tasks.task_queue import Task, TaskStatus


def make_task(**overrides) -> Task:
    payload = {
        "ref": "refs/heads/main",
        "after": "abc1234def5678",
        "repository": {
            "name": "hello",
            "full_name": "octocat/hello",
            "owner": {"login": "octocat"},
            "clone_url": "https://github.com/octocat/hello.git",
            "html_url": "https://github.com/octocat/hello",
            "default_branch": "main",
        },
        "installation": {"id": 42},
    }
    payload.update(overrides)
    return Task(
        id="push_octocat/hello_1",
        event_type="push",
        repo_full_name="octocat/hello",
        installation_id=42,
        payload=payload,
        status=TaskStatus.RUNNING,
        created_at="2024-01-01T00:00:00",
    )


@pytest.fixture
def github_client():
    client = AsyncMock(spec=GitHubClient)
    client.get_installation_access_token.return_value = "ghs_token"
    client.create_check_run.return_value = {"id": 7, "html_url": "https://github.com/octocat/hello/runs/7"}
    client.update_check_run.return_value = {"id": 7}
    client.list_pull_requests.return_value = []
    return client


@pytest.fixture
def processor(github_client) -> PushProcessor:
    processor = PushProcessor()
    processor.github_client = github_client
    return processor


def fake_clone(workspaces: list[GitWorkspace]):
    async def clone(clone_url, token, branch, sha, directory, committer, depth=1):
        root = Path(directory)
        (root / "node_modules" / ".bin").mkdir(parents=True)
        (root / "node_modules" / ".bin" / "eslint").write_text("")
        (root / "package.json").write_text("{}")
        (root / "index.js").write_text("var a = 1\n")
        workspace = GitWorkspace(root, CommitAuthor(name="Lintflow Bot", email="bot@lintflow.dev"))
        workspace.is_clean = AsyncMock(return_value=True)
        workspaces.append(workspace)
        return workspace

    return clone


@pytest.mark.asyncio
async def test_clean_push_completes_check_run(processor, github_client):
    workspaces: list[GitWorkspace] = []

    with (
        patch.object(steps.GitWorkspace, "clone", side_effect=fake_clone(workspaces)),
        patch.object(steps, "install_dependencies", AsyncMock(return_value=None)),
        patch.object(steps, "run_lint", AsyncMock(return_value=LintExecution(exit_code=0, command="$ eslint ."))),
    ):
        result = await processor.process(make_task())

    assert result.state == ProcessingState.PASS
    assert result.visible
    assert "returned no errors or warnings" in result.reason
    github_client.create_check_run.assert_awaited_once()
    assert github_client.update_check_run.call_args.kwargs["conclusion"] == "success"
    github_client.list_pull_requests.assert_awaited_once()
    github_client.create_pull_request.assert_not_awaited()
    # the temporary working directory is gone once processing finishes
    assert not workspaces[0].root.exists()


@pytest.mark.asyncio
async def test_install_failure_stops_before_lint(processor, github_client):
    run_lint = AsyncMock()

    with (
        patch.object(steps.GitWorkspace, "clone", side_effect=fake_clone([])),
        patch.object(steps, "install_dependencies", AsyncMock(return_value="`npm install` failed")),
        patch.object(steps, "run_lint", run_lint),
    ):
        result = await processor.process(make_task())

    assert result.state == ProcessingState.FAIL
    assert result.reason == "`npm install` failed"
    run_lint.assert_not_awaited()


@pytest.mark.asyncio
async def test_branch_deletion_is_ignored(processor, github_client):
    result = await processor.process(make_task(after=NULL_SHA, deleted=True))

    assert result.state == ProcessingState.PASS
    assert not result.visible
    github_client.get_installation_access_token.assert_not_awaited()


@pytest.mark.asyncio
async def test_tag_push_is_ignored(processor, github_client):
    clone = AsyncMock()

    with patch.object(steps.GitWorkspace, "clone", clone):
        result = await processor.process(make_task(ref="refs/tags/v1.0.0"))

    assert result.state == ProcessingState.PASS
    assert not result.visible
    assert result.reason == "Ignore non-branch ref"
    clone.assert_not_awaited()
    github_client.get_installation_access_token.assert_not_awaited()
    github_client.create_check_run.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(processor, github_client):
    github_client.get_installation_access_token.side_effect = RuntimeError("network down")

    with pytest.raises(RuntimeError, match="network down"):
        await processor.process(make_task())
