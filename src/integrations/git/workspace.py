import asyncio
import fnmatch
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from src.core.errors import GitCommandError

logger = structlog.get_logger(__name__)


@dataclass
class SpawnResult:
    """Exit status and combined stdout/stderr lines of a subprocess."""

    exit_code: int
    lines: list[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@dataclass
class CommitAuthor:
    name: str
    email: str


class GitWorkspace:
    """
    A local working copy of one repository at the pushed commit.

    The directory is owned by the caller; this class never deletes it.
    """

    def __init__(self, root: str | Path, committer: CommitAuthor):
        self.root = Path(root)
        self.committer = committer

    @classmethod
    async def clone(
        cls,
        clone_url: str,
        token: str | None,
        branch: str,
        sha: str,
        directory: str | Path,
        committer: CommitAuthor,
        depth: int = 1,
    ) -> "GitWorkspace":
        """Clone `branch` into `directory` and make sure HEAD is at `sha`."""
        url = _authenticated_url(clone_url, token)
        result = await spawn(
            "git",
            ["clone", "--depth", str(depth), "--branch", branch, url, str(directory)],
            cwd=None,
        )
        if result.exit_code != 0:
            raise GitCommandError(["clone", "--branch", branch, clone_url], result.exit_code, result.output)

        workspace = cls(directory, committer)
        head = (await workspace.git("rev-parse", "HEAD")).output.strip()
        if sha and head != sha:
            await workspace.git("fetch", "--depth", str(depth), "origin", sha)
            await workspace.git("reset", "--hard", sha)

        logger.info("repository_cloned", clone_url=clone_url, branch=branch, sha=sha[:7])
        return workspace

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def exists(self, *parts: str) -> bool:
        return self.path(*parts).exists()

    async def spawn(self, cmd: str, args: Sequence[str], env: dict[str, str] | None = None) -> SpawnResult:
        """Run a command inside the working copy; never raises on non-zero exit."""
        return await spawn(cmd, args, cwd=self.root, env=env)

    async def git(self, *args: str) -> SpawnResult:
        """Run a git command inside the working copy, raising on failure."""
        result = await self.spawn("git", args)
        if result.exit_code != 0:
            raise GitCommandError(list(args), result.exit_code, result.output)
        return result

    async def changed_files(self) -> list[str]:
        """Paths with uncommitted changes, including untracked files."""
        result = await self.git("status", "--porcelain", "--untracked-files=all")
        files = []
        for line in result.lines:
            if len(line) < 4:
                continue
            path = line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            files.append(path.strip('"'))
        return files

    async def is_clean(self) -> bool:
        return not await self.changed_files()

    async def checkout_branch(self, branch: str) -> None:
        """Create or reset `branch` to the current HEAD and switch to it."""
        await self.git("checkout", "-B", branch)

    async def reset_hard(self) -> SpawnResult:
        return await self.spawn("git", ["reset", "--hard"])

    async def commit_all(self, message: str, author: CommitAuthor | None = None) -> str:
        """Stage everything and commit; returns the new commit sha."""
        author = author or self.committer
        await self.git("add", "--all")
        await self.git(
            "-c",
            f"user.name={self.committer.name}",
            "-c",
            f"user.email={self.committer.email}",
            "commit",
            "--no-verify",
            "--message",
            message,
            "--author",
            f"{author.name} <{author.email}>",
        )
        sha = (await self.git("rev-parse", "HEAD")).output.strip()
        logger.info("changes_committed", sha=sha[:7])
        return sha

    async def push(self, branch: str, force: bool = False) -> None:
        args = ["push", "origin", f"HEAD:refs/heads/{branch}"]
        if force:
            args.insert(1, "--force")
        await self.git(*args)
        logger.info("branch_pushed", branch=branch, force=force)

    async def has_matching_files(self, extensions: Sequence[str], ignores: Sequence[str]) -> bool:
        """True when at least one non-ignored file ends with one of `extensions`."""
        return await asyncio.to_thread(self._find_matching_file, tuple(extensions), ignores)

    def _find_matching_file(self, extensions: tuple[str, ...], ignores: Sequence[str]) -> bool:
        for dirpath, dirnames, filenames in os.walk(self.root):
            relative_dir = os.path.relpath(dirpath, self.root)
            dirnames[:] = [
                d for d in dirnames if not _is_ignored(os.path.normpath(os.path.join(relative_dir, d)), d, ignores)
            ]
            for filename in filenames:
                relative = os.path.normpath(os.path.join(relative_dir, filename))
                if filename.endswith(extensions) and not _is_ignored(relative, filename, ignores):
                    return True
        return False


def _is_ignored(relative: str, name: str, ignores: Sequence[str]) -> bool:
    for pattern in ignores:
        pattern = pattern.strip("/")
        # `**/` also matches at the repository root
        for candidate in {pattern, pattern.removeprefix("**/")}:
            if candidate in (name, relative):
                return True
            if fnmatch.fnmatch(relative, candidate) or fnmatch.fnmatch(name, candidate):
                return True
    return False


def _authenticated_url(clone_url: str, token: str | None) -> str:
    if not token or not clone_url.startswith("https://"):
        return clone_url
    return clone_url.replace("https://", f"https://x-access-token:{token}@", 1)


async def spawn(
    cmd: str, args: Sequence[str], cwd: str | Path | None, env: dict[str, str] | None = None
) -> SpawnResult:
    """Run a subprocess and collect its combined output lines."""
    process = await asyncio.create_subprocess_exec(
        cmd,
        *args,
        cwd=str(cwd) if cwd is not None else None,
        env={**os.environ, **(env or {})},
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    stdout, _ = await process.communicate()
    lines = stdout.decode("utf-8", errors="replace").splitlines() if stdout else []
    return SpawnResult(exit_code=process.returncode if process.returncode is not None else -1, lines=lines)
