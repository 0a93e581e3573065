"""
Service configuration: sections composed into one `Config` and the shared
`config` instance read from the environment.
"""

from src.core.config.git_config import GitConfig
from src.core.config.github_config import GitHubConfig
from src.core.config.lint_config import LintConfig
from src.core.config.logging_config import LoggingConfig
from src.core.config.settings import Config, config

__all__ = [
    "Config",
    "GitConfig",
    "GitHubConfig",
    "LintConfig",
    "LoggingConfig",
    "config",
]
