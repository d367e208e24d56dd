from github_connections.github.base import GitHubClientProtocol
from github_connections.github.client import GitHubClient

__all__ = ["GitHubClient", "GitHubClientProtocol"]
