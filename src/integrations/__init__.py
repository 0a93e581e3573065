"""
Integrations for external services.

This package contains the GitHub API client and the local git working copy.
"""
