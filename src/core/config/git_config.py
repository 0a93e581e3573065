"""
Git identity configuration.
"""

from dataclasses import dataclass


@dataclass
class GitConfig:
    """Identity used for commits created by the service."""

    author_name: str = "Lintflow Bot"
    author_email: str = "bot@lintflow.dev"
    clone_depth: int = 1
