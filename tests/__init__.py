"""
Test suite for norg-task-sync.

This package contains:
- Unit tests for parsing, document edits, diffing and config
- Gateway tests against a mocked HTTP transport
- End-to-end sync runs against an in-memory fake gateway
"""
