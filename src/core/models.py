from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NULL_SHA = "0000000000000000000000000000000000000000"


class EventType(Enum):
    """Supported GitHub event types."""

    PUSH = "push"


class WebhookEvent:
    """
    A representation of an incoming webhook event, before it has been
    fully prepared and enriched by our integration logic.
    """

    def __init__(self, event_type: EventType, payload: dict[str, Any]):
        self.event_type = event_type
        self.payload = payload
        self.repository = payload.get("repository", {})
        self.sender = payload.get("sender", {})
        self.installation_id = payload.get("installation", {}).get("id")

    @property
    def repo_full_name(self) -> str:
        """The full name of the repository (e.g., 'owner/repo')."""
        return self.repository.get("full_name", "")


class PushAuthor(BaseModel):
    """Author of the head commit of a push."""

    login: str | None = None
    name: str | None = None
    email: str | None = None


class PushEvent(BaseModel):
    """
    The trigger of one pipeline run: repository, branch and commit of a push.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    full_name: str
    clone_url: str
    html_url: str
    default_branch: str = "main"
    ref: str = ""
    branch: str
    sha: str
    author: PushAuthor = Field(default_factory=PushAuthor)
    installation_id: int | None = None
    deleted: bool = False

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def is_branch(self) -> bool:
        return self.ref.startswith("refs/heads/")

    @property
    def is_deletion(self) -> bool:
        return self.deleted or not self.sha or self.sha == NULL_SHA

    @property
    def markdown_link(self) -> str:
        return f"[{self.full_name}]({self.html_url})"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PushEvent":
        """Build a PushEvent from a raw `push` webhook payload."""
        repository = payload.get("repository", {})
        owner = repository.get("owner", {})
        head_commit = payload.get("head_commit") or {}
        commit_author = head_commit.get("author") or {}
        full_name = repository.get("full_name", "")

        return cls(
            owner=owner.get("login") or owner.get("name") or full_name.split("/")[0],
            name=repository.get("name") or full_name.split("/")[-1],
            full_name=full_name,
            clone_url=repository.get("clone_url") or f"https://github.com/{full_name}.git",
            html_url=repository.get("html_url") or f"https://github.com/{full_name}",
            default_branch=repository.get("default_branch") or repository.get("master_branch") or "main",
            ref=payload.get("ref", ""),
            branch=payload.get("ref", "").removeprefix("refs/heads/"),
            sha=payload.get("after") or "",
            author=PushAuthor(
                login=commit_author.get("username") or payload.get("sender", {}).get("login"),
                name=commit_author.get("name") or payload.get("pusher", {}).get("name"),
                email=commit_author.get("email") or payload.get("pusher", {}).get("email"),
            ),
            installation_id=payload.get("installation", {}).get("id"),
            deleted=payload.get("deleted", False),
        )


class Severity(IntEnum):
    """Severity levels as reported by the lint tool."""

    WARNING = 1
    ERROR = 2


class Violation(BaseModel):
    """A single finding of the lint tool, bound to a repository-relative file range."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    message: str
    rule_id: str | None = None
    start_line: int = Field(ge=1)
    start_column: int = Field(ge=1)
    end_line: int = Field(ge=1)
    end_column: int = Field(ge=1)
    severity: Severity
