"""
GitHub configuration.
"""

from dataclasses import dataclass


@dataclass
class GitHubConfig:
    """GitHub App configuration."""

    app_name: str
    app_id: str
    private_key: str
    webhook_secret: str
    api_base_url: str = "https://api.github.com"
