"""
Per-run lint configuration.

Service defaults (see `src.core.config.lint_config`) are merged with the
repository's own `.lintflow/config.yaml`, if it has one. Option names follow
the repository file format (`commitMsg`, `push`, ...).
"""

from enum import Enum
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config.lint_config import LintConfig

logger = structlog.get_logger(__name__)

NPM_INSTALL_ARGS = ["--no-audit", "--no-fund"]
NPM_DEV_INSTALL_ARGS = ["--save-dev", "--no-audit", "--no-fund"]


class PushStrategy(str, Enum):
    """How fixes produced by the lint tool are persisted."""

    NONE = "none"
    COMMIT = "commit"
    COMMIT_DEFAULT = "commit_default"
    PR = "pr"
    PR_DEFAULT = "pr_default"
    PR_DEFAULT_COMMIT = "pr_default_commit"


class LintConfiguration(BaseModel):
    """Recognised lint options for one run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ext: list[str] = Field(default_factory=lambda: [".js"])
    ignores: list[str] = Field(default_factory=lambda: ["node_modules"])
    config: str | None = None
    args: list[str] = Field(default_factory=list)
    modules: list[str] = Field(default_factory=list)
    push: PushStrategy = PushStrategy.NONE
    commit_msg: str = Field(default="ESLint fixes\n\n[lintflow:generated]", alias="commitMsg")
    labels: list[str] = Field(default_factory=list)

    @field_validator("ext")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        return [e if e.startswith(".") else f".{e}" for e in value]

    @property
    def fix(self) -> bool:
        """Whether the tool should be asked to rewrite files in place."""
        return self.push != PushStrategy.NONE


def default_configuration(defaults: LintConfig) -> dict[str, Any]:
    """Translate service-level defaults into repository option names."""
    return {
        "ext": list(defaults.ext),
        "ignores": list(defaults.ignores),
        "push": defaults.push,
        "commitMsg": defaults.commit_msg,
        "labels": list(defaults.labels),
    }


def merge_configuration(defaults: LintConfig, overrides: dict[str, Any] | None) -> LintConfiguration:
    """Merge repository overrides over service defaults; `None` values do not override."""
    merged = default_configuration(defaults)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value
    return LintConfiguration.model_validate(merged)


def load_configuration(root: str | Path, defaults: LintConfig) -> LintConfiguration:
    """
    Load the effective configuration for a working copy.

    Raises:
        ValueError: If the repository file is not a YAML mapping or holds invalid values.
    """
    config_path = Path(root) / defaults.repo_config_path
    overrides: dict[str, Any] | None = None

    if config_path.is_file():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"{defaults.repo_config_path} is not valid YAML: {e}") from e
        if raw is not None and not isinstance(raw, dict):
            raise ValueError(f"{defaults.repo_config_path} must contain a mapping of options")
        overrides = raw
        logger.info("repository_configuration_loaded", path=str(config_path), keys=sorted((raw or {}).keys()))

    return merge_configuration(defaults, overrides)
