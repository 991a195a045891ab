"""GitHub API access."""
