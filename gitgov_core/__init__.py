"""
GitGov Core

Version-controlled record store: structured documents persisted as files in
Git history, with the same operations available over a local working copy,
an in-memory double, or the GitHub REST API.

Main Components:
- git: GitModule interface and its local, memory and GitHub backends
- record_store: RecordStore interface and its fs, memory and GitHub backends
- config_store: project configuration persistence
- factories: backend selection by name
"""

__version__ = "0.1.0"
