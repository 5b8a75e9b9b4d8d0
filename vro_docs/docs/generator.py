"""
Documentation generation over every workflow export in a repository.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from vro_docs.docs.html import html_links, render_html_page
from vro_docs.docs.render import IndexEntry, create_loader, render_index, render_workflow
from vro_docs.exceptions import WorkflowError
from vro_docs.forms import load_form
from vro_docs.util.files import ensure_dir, safe_filename, write_text
from vro_docs.workflow import parse_workflow

logger = logging.getLogger(__name__)

DEFAULT_GLOB = "**/*workflow.xml"
INDEX_NAME = "README"


@dataclass
class DocsResult:
    """Outcome of a documentation run."""

    written: list[Path] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)
    index_file: Path | None = None

    @property
    def documented_count(self) -> int:
        return len([p for p in self.written if p.suffix == ".md" and p.stem != INDEX_NAME])


def discover_workflows(root: Path, pattern: str = DEFAULT_GLOB) -> list[Path]:
    """
    Find workflow exports below ``root``.

    Hidden directories are searched too.

    Args:
        root: Directory to search from
        pattern: Glob relative to ``root``

    Returns:
        Sorted list of matching files
    """
    return sorted({p for p in Path(root).glob(pattern) if p.is_file()})


def output_filename(name: str, suffix: str = ".md") -> str:
    """File name of a workflow's documentation page."""
    return f"{safe_filename(name)}{suffix}"


def generate_docs(
    root: Path,
    out_dir: Path,
    pattern: str = DEFAULT_GLOB,
    html: bool = False,
    index: bool = True,
    on_file: Callable[[Path], None] | None = None,
) -> DocsResult:
    """
    Render Markdown documentation for every workflow matching ``pattern``.

    A workflow that cannot be parsed is recorded in ``failures`` and the run
    continues with the next file.

    Args:
        root: Repository root; also where a custom ``templates/`` is looked up
        out_dir: Output directory (relative paths resolve against ``root``)
        pattern: Workflow glob
        html: Also write an HTML page per workflow
        index: Write a README (and index.html) listing every workflow
        on_file: Called with each workflow path before it is rendered

    Returns:
        DocsResult with written files and failures
    """
    root = Path(root)
    out_dir = Path(out_dir)
    if not out_dir.is_absolute():
        out_dir = root / out_dir
    ensure_dir(out_dir)

    loader = create_loader(root)
    result = DocsResult()
    entries: list[IndexEntry] = []
    used_names: set[str] = set()
    if index:
        used_names.add(output_filename(INDEX_NAME))
        if html:
            used_names.add(output_filename("index"))

    files = discover_workflows(root, pattern)
    logger.debug(f"Generating docs for {len(files)} workflow(s)")

    for xml_file in files:
        if on_file is not None:
            on_file(xml_file)

        try:
            workflow = parse_workflow(xml_file)
        except WorkflowError as e:
            logger.warning(f"Skipping {xml_file}: {e.message}")
            result.failures.append((xml_file, e.message))
            continue

        filename = output_filename(workflow.name)
        if filename in used_names:
            stem = f"{workflow.name}_{workflow.id}"
            filename = output_filename(stem)
            counter = 2
            while filename in used_names:
                filename = output_filename(f"{stem}_{counter}")
                counter += 1
            logger.warning(
                f"Duplicate workflow name '{workflow.name}', writing {filename} instead"
            )
        used_names.add(filename)

        markdown_text = render_workflow(workflow, load_form(xml_file), loader)
        md_path = out_dir / filename
        write_text(md_path, markdown_text)
        result.written.append(md_path)
        logger.debug(f"Wrote {md_path}")

        if html:
            html_path = md_path.with_suffix(".html")
            write_text(html_path, render_html_page(markdown_text, workflow.name, loader))
            result.written.append(html_path)

        entries.append(
            IndexEntry(
                name=workflow.name,
                id=workflow.id,
                version=workflow.version,
                filename=filename,
                element_count=len(workflow.elements),
            )
        )

    if index:
        index_text = render_index(entries, loader)
        result.index_file = out_dir / f"{INDEX_NAME}.md"
        write_text(result.index_file, index_text)
        result.written.append(result.index_file)

        if html:
            html_index = out_dir / "index.html"
            write_text(
                html_index,
                render_html_page(html_links(index_text), "Workflow Documentation", loader),
            )
            result.written.append(html_index)

    return result
