"""Version-control queries."""

from .client import GitClient, github_repo_name

__all__ = ["GitClient", "github_repo_name"]
