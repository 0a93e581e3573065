"""
Installs the project's npm dependencies before linting.
"""

import structlog

from src.integrations.git.workspace import GitWorkspace
from src.lint.configuration import NPM_DEV_INSTALL_ARGS, NPM_INSTALL_ARGS

logger = structlog.get_logger(__name__)

NPM_ENV = {"NODE_ENV": "development"}


async def install_dependencies(workspace: GitWorkspace, modules: list[str]) -> str | None:
    """
    Install dependencies, then any extra `modules`.

    Returns None on success, or the failure message for the status line.
    Extra modules are installed as dev dependencies and the resulting
    manifest changes are reset so they never count as lint fixes.
    """
    had_lockfile = workspace.exists("package-lock.json")
    if had_lockfile:
        result = await workspace.spawn("npm", ["ci", *NPM_INSTALL_ARGS], env=NPM_ENV)
    else:
        result = await workspace.spawn("npm", ["install", *NPM_INSTALL_ARGS], env=NPM_ENV)
    if result.exit_code != 0:
        logger.error("npm_install_failed", exit_code=result.exit_code, output=result.output)
        return "`npm install` failed"

    if modules:
        logger.info("npm_install_modules", modules=modules)
        result = await workspace.spawn("npm", ["install", *modules, *NPM_DEV_INSTALL_ARGS], env=NPM_ENV)
        if result.exit_code != 0:
            logger.error("npm_install_failed", exit_code=result.exit_code, output=result.output)
            return "`npm install` failed"

        result = await workspace.reset_hard()
        if result.exit_code != 0:
            logger.error("git_reset_failed", exit_code=result.exit_code, output=result.output)
            return "`git reset --hard` failed"

    if not had_lockfile:
        # a lockfile written by `npm install` is not a lint fix
        workspace.path("package-lock.json").unlink(missing_ok=True)

    return None
