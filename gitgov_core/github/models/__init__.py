"""Models for GitHub payloads and GitHub-backed component options."""
