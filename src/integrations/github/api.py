import base64
import time
from typing import Any

import httpx
import jwt
import structlog
from cachetools import TTLCache
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config import config
from src.core.errors import (
    GitHubApiError,
    GitHubRateLimitError,
    GitHubResourceNotFoundError,
    PullRequestAlreadyExistsError,
)

logger = structlog.get_logger(__name__)

ACCEPT = "application/vnd.github.v3+json"


class GitHubClient:
    """
    A client for interacting with the GitHub REST API as a GitHub App.

    This client handles the authentication flow for a GitHub App, including
    generating a JWT and exchanging it for an installation access token.
    Tokens are cached to improve performance and avoid rate limiting.

    Every call raises on a non-success response; callers decide which
    failures are recoverable.
    """

    def __init__(self, base_url: str | None = None, app_id: str | None = None, private_key_base64: str | None = None):
        self.base_url = (base_url or config.github.api_base_url).rstrip("/")
        self._app_id = app_id if app_id is not None else config.github.app_id
        self._private_key_base64 = private_key_base64 if private_key_base64 is not None else config.github.private_key
        # Cache for installation tokens (TTL: 50 minutes, GitHub tokens expire in 60)
        self._token_cache: TTLCache = TTLCache(maxsize=100, ttl=50 * 60)

    async def get_installation_access_token(self, installation_id: int) -> str:
        """
        Gets an access token for a specific installation of the GitHub App.
        Caches the token to avoid regenerating it for every request.
        """
        if installation_id in self._token_cache:
            logger.debug("installation_token_cache_hit", installation_id=installation_id)
            return self._token_cache[installation_id]

        headers = {"Authorization": f"Bearer {self._generate_jwt()}", "Accept": ACCEPT}
        data = await self._send("POST", f"/app/installations/{installation_id}/access_tokens", headers)
        token = data["token"]
        self._token_cache[installation_id] = token
        logger.info("installation_token_generated", installation_id=installation_id)
        return token

    # --- Check runs ---

    async def create_check_run(
        self, repo: str, sha: str, name: str, title: str, summary: str, installation_id: int
    ) -> dict[str, Any]:
        """Create an in-progress check run on a commit."""
        data = {
            "name": name,
            "head_sha": sha,
            "status": "in_progress",
            "output": {"title": title, "summary": summary},
        }
        result = await self._request("POST", f"/repos/{repo}/check-runs", installation_id, json=data)
        logger.info("check_run_created", repo=repo, sha=sha[:7], check_run_id=result.get("id"))
        return result

    async def update_check_run(
        self,
        repo: str,
        check_run_id: int,
        output: dict[str, Any],
        installation_id: int,
        status: str | None = None,
        conclusion: str | None = None,
    ) -> dict[str, Any]:
        """Update a check run; `conclusion` implies a completed status."""
        data: dict[str, Any] = {"output": output}
        if status:
            data["status"] = status
        if conclusion:
            data["conclusion"] = conclusion
        result = await self._request("PATCH", f"/repos/{repo}/check-runs/{check_run_id}", installation_id, json=data)
        logger.info(
            "check_run_updated",
            repo=repo,
            check_run_id=check_run_id,
            conclusion=conclusion,
            annotations=len(output.get("annotations", [])),
        )
        return result

    # --- Pull requests ---

    async def list_pull_requests(
        self,
        repo: str,
        installation_id: int,
        state: str = "open",
        base: str | None = None,
        head: str | None = None,
        per_page: int = 100,
    ) -> list[dict[str, Any]]:
        """
        List pull requests for a repository.

        Args:
            repo: Full repo name (owner/repo)
            installation_id: GitHub App installation id
            state: "open", "closed", or "all"
            base: Only pull requests into this branch
            head: Only pull requests from this branch, as `owner:branch`
        """
        params: dict[str, Any] = {"state": state, "per_page": min(per_page, 100)}
        if base:
            params["base"] = base
        if head:
            params["head"] = head
        result = await self._request("GET", f"/repos/{repo}/pulls", installation_id, params=params)
        logger.info("pull_requests_listed", repo=repo, base=base, head=head, count=len(result))
        return result

    async def create_pull_request(
        self, repo: str, title: str, head: str, base: str, body: str, installation_id: int
    ) -> dict[str, Any]:
        """
        Open a pull request.

        Raises:
            PullRequestAlreadyExistsError: If an open pull request for head and base already exists.
        """
        payload = {"title": title, "head": head, "base": base, "body": body}
        try:
            result = await self._request("POST", f"/repos/{repo}/pulls", installation_id, json=payload)
        except GitHubApiError as e:
            if e.status_code == 422 and "already exists" in str(e.body).lower():
                message = f"Pull request {head} -> {base} exists"
                raise PullRequestAlreadyExistsError(e.status_code, message, e.body) from e
            raise
        logger.info("pull_request_created", repo=repo, number=result.get("number"), head=head, base=base)
        return result

    async def update_pull_request(
        self,
        repo: str,
        pr_number: int,
        installation_id: int,
        title: str | None = None,
        body: str | None = None,
        state: str | None = None,
    ) -> dict[str, Any]:
        """Update title, body or state of a pull request."""
        payload = {key: value for key, value in {"title": title, "body": body, "state": state}.items() if value}
        result = await self._request("PATCH", f"/repos/{repo}/pulls/{pr_number}", installation_id, json=payload)
        logger.info("pull_request_updated", repo=repo, number=pr_number, fields=sorted(payload))
        return result

    async def request_reviewers(
        self, repo: str, pr_number: int, reviewers: list[str], installation_id: int
    ) -> dict[str, Any]:
        payload = {"reviewers": reviewers}
        return await self._request(
            "POST", f"/repos/{repo}/pulls/{pr_number}/requested_reviewers", installation_id, json=payload
        )

    async def add_labels(self, repo: str, issue_number: int, labels: list[str], installation_id: int) -> list[dict]:
        payload = {"labels": labels}
        return await self._request("POST", f"/repos/{repo}/issues/{issue_number}/labels", installation_id, json=payload)

    async def create_issue_comment(
        self, repo: str, issue_number: int, comment: str, installation_id: int
    ) -> dict[str, Any]:
        """Create a comment on an issue or pull request."""
        result = await self._request(
            "POST", f"/repos/{repo}/issues/{issue_number}/comments", installation_id, json={"body": comment}
        )
        logger.info("issue_comment_created", repo=repo, number=issue_number)
        return result

    async def delete_branch(self, repo: str, branch: str, installation_id: int) -> bool:
        """Delete a branch; returns False when it is already gone."""
        try:
            await self._request("DELETE", f"/repos/{repo}/git/refs/heads/{branch}", installation_id)
        except GitHubResourceNotFoundError:
            return False
        except GitHubApiError as e:
            # GitHub answers 422 "Reference does not exist" for refs deleted concurrently
            if e.status_code == 422:
                return False
            raise
        logger.info("branch_deleted", repo=repo, branch=branch)
        return True

    # --- Transport ---

    async def _request(
        self,
        method: str,
        path: str,
        installation_id: int,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        token = await self.get_installation_access_token(installation_id)
        headers = {"Authorization": f"Bearer {token}", "Accept": ACCEPT}
        return await self._send(method, path, headers, json=json, params=params)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.request(method, url, headers=headers, json=json, params=params)

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

        body: Any
        try:
            body = response.json()
        except ValueError:
            body = response.text
        message = body.get("message", response.reason_phrase) if isinstance(body, dict) else response.reason_phrase

        logger.error("github_api_error", method=method, url=url, status_code=response.status_code, body=body)
        if response.status_code == 404:
            raise GitHubResourceNotFoundError(404, message, body)
        if response.status_code == 403 and "rate limit" in response.text.lower():
            raise GitHubRateLimitError(403, message, body)
        raise GitHubApiError(response.status_code, message, body)

    def _generate_jwt(self) -> str:
        """Generates a JSON Web Token (JWT) to authenticate as the GitHub App."""
        now = int(time.time())
        payload = {
            "iat": now - 60,
            "exp": now + (9 * 60),
            "iss": self._app_id,
        }
        return jwt.encode(payload, self._decode_private_key(), algorithm="RS256")

    def _decode_private_key(self) -> str:
        """
        Decodes the base64-encoded private key from the configuration.

        Returns:
            The decoded private key as a string.
        """
        try:
            return base64.b64decode(self._private_key_base64).decode("utf-8")
        except Exception as e:
            logger.error("private_key_decode_failed", error=str(e))
            raise ValueError("Invalid private key format. Expected base64-encoded PEM key.") from e


# Global instance
github_client = GitHubClient()
