"""
Markdown rendering for parsed workflows.

The document layout lives in the ``workflow.md.j2`` and ``index.md.j2``
templates; this module supplies the table and code fence filters and the
column definitions they use.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vro_docs.forms import FormProperty
from vro_docs.util.templates import TemplateLoader
from vro_docs.workflow import Workflow

NO_DESCRIPTION = "_No description provided_"

# (attribute, header) pairs
PARAMETER_COLUMNS = [("name", "Name"), ("type", "Type")]
BINDING_COLUMNS = [
    ("name", "Variable Name"),
    ("type", "Type"),
    ("export_name", "Workflow Variable"),
]
FORM_COLUMNS = [
    ("id", "ID"),
    ("label", "Label"),
    ("data_type", "Data Type"),
    ("constraints", "Constraints"),
    ("default", "Default"),
    ("value_list", "Value List"),
    ("signpost", "Signpost"),
]


@dataclass
class IndexEntry:
    """One row of the documentation index."""

    name: str
    id: str
    version: str
    filename: str
    element_count: int


def md_cell(value: Any) -> str:
    """Format a value for a Markdown table cell."""
    if value is None:
        return ""
    text = str(value).replace("|", "\\|")
    return re.sub(r"\r?\n", "<br>", text)


def md_link_text(value: Any) -> str:
    """Format a value as the text of a Markdown link inside a table cell."""
    return re.sub(r"([\[\]])", r"\\\1", md_cell(value))


def md_table(rows: list[Any], columns: list[tuple[str, str]]) -> str:
    """
    Build a Markdown table.

    Rows may be dicts or objects; missing attributes render as empty cells.
    The result has no trailing newline.

    Example:
        >>> print(md_table([{"name": "vsName", "type": "string"}], PARAMETER_COLUMNS))
        | Name | Type |
        |-|-|
        | vsName | string |
    """
    if not rows:
        return ""

    lines = [
        "| " + " | ".join(header for _, header in columns) + " |",
        "|" + "-|" * len(columns),
    ]
    for row in rows:
        cells = []
        for key, _ in columns:
            value = row.get(key) if isinstance(row, dict) else getattr(row, key, None)
            cells.append(md_cell(value))
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def fence(code: str, lang: str = "javascript") -> str:
    """Wrap code in a fence longer than any backtick run inside it."""
    longest = max((len(run) for run in re.findall(r"`+", code)), default=0)
    ticks = "`" * max(3, longest + 1)
    return f"{ticks}{lang}\n{code}\n{ticks}"


MARKDOWN_FILTERS = {
    "md_table": md_table,
    "md_cell": md_cell,
    "md_link_text": md_link_text,
    "fence": fence,
}


def create_loader(project_root: Path) -> TemplateLoader:
    return TemplateLoader(project_root, filters=MARKDOWN_FILTERS)


def render_workflow(
    workflow: Workflow,
    form: list[FormProperty] | None = None,
    loader: TemplateLoader | None = None,
) -> str:
    """
    Render the Markdown documentation of one workflow.

    Args:
        workflow: Parsed workflow
        form: Form properties loaded from ``forms/_.json``
        loader: Template loader; defaults to the packaged templates

    Returns:
        Markdown document
    """
    loader = loader or create_loader(Path.cwd())
    context = {
        "workflow": workflow,
        "form": form or [],
        "parameter_sections": [
            ("Workflow Variables", workflow.attributes),
            ("Workflow Inputs", workflow.inputs),
            ("Workflow Outputs", workflow.outputs),
        ],
        "NO_DESCRIPTION": NO_DESCRIPTION,
        "PARAMETER_COLUMNS": PARAMETER_COLUMNS,
        "BINDING_COLUMNS": BINDING_COLUMNS,
        "FORM_COLUMNS": FORM_COLUMNS,
    }
    return loader.render("workflow.md.j2", context)


def render_index(entries: list[IndexEntry], loader: TemplateLoader) -> str:
    """Render the README listing every documented workflow."""
    return loader.render(
        "index.md.j2",
        {"entries": sorted(entries, key=lambda e: e.name.lower())},
    )
