"""
Utility functions and helpers.

This package contains reusable utilities for file operations, retries,
progress output, secret redaction, and template rendering.

Modules:
- files: Directory and text file helpers
- retry: Retry decorator with backoff
- progress: rich progress bars and summaries
- redact: Secret redaction for log and error messages
- templates: Jinja2 template loading with project overrides
"""
