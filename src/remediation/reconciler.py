"""
Reconciles the remediation branch and pull request with the working tree.

After the lint tool has run (and possibly rewritten files), the reconciler
either does nothing, commits the fixes straight onto the pushed branch, or
maintains a single remediation pull request per base branch. When the tree is
clean it closes remediation pull requests that have become stale.

Remote mutations overwrite instead of append (force-pushed branch, updated
pull request body) so that concurrent or repeated runs converge on the same
state without locking.
"""

from typing import Any

import structlog

from src.core.errors import GitHubApiError, PullRequestAlreadyExistsError
from src.core.models import PushEvent
from src.integrations.git.workspace import CommitAuthor, GitWorkspace
from src.integrations.github.api import GitHubClient
from src.presentation import github_formatter
from src.remediation.models import (
    RemediationAction,
    RemediationOutcome,
    RemediationRequest,
    RemediationResult,
)

logger = structlog.get_logger(__name__)


class RemediationReconciler:
    """Persists lint fixes for one push event."""

    def __init__(self, github_client: GitHubClient, workspace: GitWorkspace, event: PushEvent, installation_id: int):
        self.github_client = github_client
        self.workspace = workspace
        self.event = event
        self.installation_id = installation_id

    @property
    def repo(self) -> str:
        return self.event.full_name

    async def find_open_pull_requests(self, request: RemediationRequest) -> list[dict[str, Any]]:
        """Open pull requests from the remediation branch into the triggering branch, oldest first."""
        pulls = await self.github_client.list_pull_requests(
            repo=self.repo,
            installation_id=self.installation_id,
            state="open",
            base=request.base_branch,
            head=f"{self.event.owner}:{request.branch_name}",
        )
        matching = [
            pr
            for pr in pulls
            if pr.get("head", {}).get("ref") == request.branch_name
            and pr.get("base", {}).get("ref") == request.base_branch
        ]
        return sorted(matching, key=lambda pr: pr["number"])

    async def close_stale(self, request: RemediationRequest) -> RemediationResult:
        """
        Close remediation pull requests whose fixes already landed on the base branch.

        Only called for a clean working tree. Each open pull request gets an
        explanatory comment, is closed, and its head branch is deleted.
        """
        open_pulls = await self.find_open_pull_requests(request)
        if not open_pulls:
            return RemediationResult(outcome=RemediationOutcome.NOOP)

        closed = []
        for pr in open_pulls:
            number = pr["number"]
            await self.github_client.create_issue_comment(
                self.repo, number, github_formatter.STALE_PULL_REQUEST_COMMENT, self.installation_id
            )
            await self.github_client.update_pull_request(self.repo, number, self.installation_id, state="closed")
            closed.append(number)
            logger.info("stale_pull_request_closed", repo=self.repo, number=number, branch=request.branch_name)

        await self.github_client.delete_branch(self.repo, request.branch_name, self.installation_id)
        return RemediationResult(
            outcome=RemediationOutcome.CLOSED, branch=request.branch_name, closed_pull_requests=closed
        )

    async def persist(self, request: RemediationRequest) -> RemediationResult:
        """Persist the working-tree changes according to the request's strategy."""
        changed_files = await self.workspace.changed_files()
        if not changed_files:
            return RemediationResult(outcome=RemediationOutcome.NOOP)

        action = request.action
        logger.info(
            "persisting_fixes",
            repo=self.repo,
            strategy=request.strategy.value,
            action=action.value,
            branch=request.base_branch,
            files=len(changed_files),
        )

        match action:
            case RemediationAction.NONE:
                return RemediationResult(outcome=RemediationOutcome.NOOP, changed_files=changed_files)
            case RemediationAction.COMMIT:
                return await self._commit(request, changed_files)
            case RemediationAction.PULL_REQUEST:
                return await self._pull_request(request, changed_files)
        raise ValueError(f"Unhandled remediation action: {action}")

    def _author(self) -> CommitAuthor | None:
        author = self.event.author
        if author.name and author.email:
            return CommitAuthor(name=author.name, email=author.email)
        return None

    async def _commit(self, request: RemediationRequest, changed_files: list[str]) -> RemediationResult:
        await self.workspace.commit_all(request.commit_message, self._author())
        await self.workspace.push(request.base_branch)
        return RemediationResult(
            outcome=RemediationOutcome.COMMITTED, branch=request.base_branch, changed_files=changed_files
        )

    async def _pull_request(self, request: RemediationRequest, changed_files: list[str]) -> RemediationResult:
        await self.workspace.checkout_branch(request.branch_name)
        await self.workspace.commit_all(request.commit_message, self._author())
        await self.workspace.push(request.branch_name, force=True)

        body = github_formatter.format_pull_request_body(changed_files)
        open_pulls = await self.find_open_pull_requests(request)

        if open_pulls:
            pr = await self.github_client.update_pull_request(
                self.repo, open_pulls[0]["number"], self.installation_id, body=body
            )
            pr = {**open_pulls[0], **pr}
            outcome = RemediationOutcome.PULL_REQUEST_UPDATED
        else:
            try:
                pr = await self.github_client.create_pull_request(
                    repo=self.repo,
                    title=github_formatter.PULL_REQUEST_TITLE,
                    head=request.branch_name,
                    base=request.base_branch,
                    body=body,
                    installation_id=self.installation_id,
                )
            except PullRequestAlreadyExistsError:
                # another run opened it between listing and creating; the pushed branch already updated it
                logger.warning("pull_request_already_exists", repo=self.repo, branch=request.branch_name)
                return RemediationResult(
                    outcome=RemediationOutcome.PULL_REQUEST_PENDING,
                    branch=request.branch_name,
                    changed_files=changed_files,
                )
            outcome = RemediationOutcome.PULL_REQUEST_CREATED
            await self._request_review(pr["number"])

        if request.labels:
            await self.github_client.add_labels(self.repo, pr["number"], sorted(request.labels), self.installation_id)

        return RemediationResult(
            outcome=outcome,
            branch=request.branch_name,
            pull_request_number=pr["number"],
            pull_request_url=pr.get("html_url"),
            changed_files=changed_files,
        )

    async def _request_review(self, pr_number: int) -> None:
        login = self.event.author.login
        if not login:
            return
        try:
            await self.github_client.request_reviewers(self.repo, pr_number, [login], self.installation_id)
        except GitHubApiError as e:
            # 422 when the author cannot be requested (e.g. the app itself or a non-collaborator)
            if e.status_code != 422:
                raise
            logger.warning("review_request_rejected", repo=self.repo, number=pr_number, reviewer=login)
