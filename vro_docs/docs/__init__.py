"""
Markdown documentation for workflow exports.

Modules:
- render: Markdown rendering of one workflow and of the index
- html: Optional HTML pages converted from the Markdown
- generator: Discovery and rendering of every workflow in a repository
"""

from vro_docs.docs.generator import DocsResult, discover_workflows, generate_docs
from vro_docs.docs.render import render_workflow

__all__ = ["DocsResult", "discover_workflows", "generate_docs", "render_workflow"]
