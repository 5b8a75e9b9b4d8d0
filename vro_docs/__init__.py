"""
vro-docs: documentation and CI tooling for vRealize Orchestrator workflow exports.

Reads workflow XML exported from vRealize Orchestrator and turns it into
human-readable Markdown, checks naming conventions and embedded scripts,
and triggers documentation runs on a vRealize Automation appliance.

Main features:
- Markdown (and optional HTML) reports per workflow, with a README index
- Naming and description validation for inputs, outputs and variables
- ESLint integration for embedded scriptable task code
- Workflow discovery for CI matrices
- vRA workflow execution with retries
- Documentation branch publishing
"""

__version__ = "0.3.0"
