from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.core.models import PushEvent
from src.lint.configuration import LintConfiguration, PushStrategy


class RemediationAction(str, Enum):
    """What persisting fixes means for one run once strategy gating is applied."""

    NONE = "none"
    COMMIT = "commit"
    PULL_REQUEST = "pull_request"


class RemediationRequest(BaseModel):
    """
    How fixes for one push should be persisted.

    `branch_name` only depends on the configured prefix and the triggering
    branch, so repeated runs for the same branch target the same remediation
    branch.
    """

    model_config = ConfigDict(frozen=True)

    strategy: PushStrategy
    branch_name: str
    commit_message: str
    base_branch: str
    default_branch: str
    labels: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def for_push(cls, configuration: LintConfiguration, event: PushEvent, branch_prefix: str) -> "RemediationRequest":
        return cls(
            strategy=configuration.push,
            branch_name=remediation_branch_name(branch_prefix, event.branch),
            commit_message=configuration.commit_msg,
            base_branch=event.branch,
            default_branch=event.default_branch,
            labels=frozenset(configuration.labels),
        )

    @property
    def on_default_branch(self) -> bool:
        return self.base_branch == self.default_branch

    @property
    def action(self) -> RemediationAction:
        """Resolve the strategy against the triggering branch."""
        match self.strategy:
            case PushStrategy.NONE:
                return RemediationAction.NONE
            case PushStrategy.COMMIT:
                return RemediationAction.COMMIT
            case PushStrategy.COMMIT_DEFAULT:
                return RemediationAction.COMMIT if self.on_default_branch else RemediationAction.NONE
            case PushStrategy.PR:
                return RemediationAction.PULL_REQUEST
            case PushStrategy.PR_DEFAULT:
                return RemediationAction.PULL_REQUEST if self.on_default_branch else RemediationAction.NONE
            case PushStrategy.PR_DEFAULT_COMMIT:
                return RemediationAction.PULL_REQUEST if self.on_default_branch else RemediationAction.COMMIT
        raise ValueError(f"Unhandled push strategy: {self.strategy}")


def remediation_branch_name(prefix: str, branch: str) -> str:
    return f"{prefix}-{branch}"


class RemediationOutcome(str, Enum):
    NOOP = "noop"
    COMMITTED = "committed"
    PULL_REQUEST_CREATED = "pull_request_created"
    PULL_REQUEST_UPDATED = "pull_request_updated"
    PULL_REQUEST_PENDING = "pull_request_pending"
    CLOSED = "closed"


class RemediationResult(BaseModel):
    """What the reconciler did for one run."""

    outcome: RemediationOutcome
    branch: str | None = None
    pull_request_number: int | None = None
    pull_request_url: str | None = None
    closed_pull_requests: list[int] = Field(default_factory=list)
    changed_files: list[str] = Field(default_factory=list)
