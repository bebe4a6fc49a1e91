"""CLI command groups for wxdash."""
