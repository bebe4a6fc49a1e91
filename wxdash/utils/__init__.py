"""Utility modules for wxdash.

- logging_utils: file and stderr logging setup for the TUI and CLI
- output: the shared Rich console and JSON output helper
"""
