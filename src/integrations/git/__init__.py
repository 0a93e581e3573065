"""
Local git working copies.
"""

from src.integrations.git.workspace import CommitAuthor, GitWorkspace, SpawnResult

__all__ = [
    "CommitAuthor",
    "GitWorkspace",
    "SpawnResult",
]
