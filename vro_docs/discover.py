"""
Workflow discovery for CI job matrices.

Finds every XML file whose root element carries an ``id`` attribute and
publishes the list as a GitHub Actions matrix.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from defusedxml import DefusedXmlException, ElementTree  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"


def read_root_id(xml_file: Path) -> str | None:
    """
    Return the ``id`` attribute of the document root.

    Returns None when the file has no root id or cannot be parsed.
    """
    try:
        root = ElementTree.parse(str(xml_file)).getroot()
    except (ElementTree.ParseError, DefusedXmlException, OSError) as e:
        logger.debug(f"Skipping {xml_file}: {e}")
        return None

    if root is None:
        return None
    return root.get("id") or None


def find_workflow_ids(root: Path) -> list[dict[str, str]]:
    """
    Walk ``root`` and collect XML files that carry a root ``id``.

    Args:
        root: Directory to walk

    Returns:
        ``{"id", "path"}`` records sorted by path; paths are relative to ``root``
        and prefixed with ``./`` as a shell would print them
    """
    root = Path(root)
    found = []
    for xml_file in sorted(root.rglob("*.xml")):
        if not xml_file.is_file():
            continue
        workflow_id = read_root_id(xml_file)
        if workflow_id:
            found.append({"id": workflow_id, "path": f"./{xml_file.relative_to(root).as_posix()}"})

    logger.debug(f"Found {len(found)} workflow(s) with an id under {root}")
    return found


def build_matrix(found: list[dict[str, str]]) -> dict[str, Any]:
    """Wrap discovered workflows in a GitHub Actions ``include`` matrix."""
    return {"include": found}


def write_github_output(name: str, value: Any) -> bool:
    """
    Append ``name=value`` to the GitHub Actions step output file.

    Non-string values are written as compact JSON.

    Returns:
        True if written, False when ``GITHUB_OUTPUT`` is not set
    """
    output_file = os.environ.get(GITHUB_OUTPUT_ENV)
    if not output_file:
        return False

    text = value if isinstance(value, str) else json.dumps(value)
    with open(output_file, "a", encoding="utf-8") as fh:
        fh.write(f"{name}={text}\n")
    return True
