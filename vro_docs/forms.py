"""
Loader for the input form exported next to a workflow.

vRealize Orchestrator stores custom forms as ``forms/_.json`` beside the
workflow XML. Only the ``schema`` object is documented here.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

FORM_DIR = "forms"
FORM_FILE = "_.json"


@dataclass
class FormProperty:
    """One field of the workflow input form."""

    id: str
    label: str
    data_type: str
    constraints: str
    default: str
    value_list: str
    signpost: str


def _compact_json(value: Any) -> str:
    """Compact JSON for table cells; missing values render as ``{}``."""
    return json.dumps({} if value is None else value, separators=(",", ":"), ensure_ascii=False)


def form_path(xml_file: Path) -> Path:
    return Path(xml_file).parent / FORM_DIR / FORM_FILE


def load_form(xml_file: Path) -> list[FormProperty]:
    """
    Load form properties for a workflow.

    Args:
        xml_file: Path to the workflow XML file

    Returns:
        Form properties in schema order; empty when there is no form file
        or it cannot be read
    """
    path = form_path(xml_file)
    if not path.is_file():
        return []

    try:
        form = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable form {path}: {e}")
        return []

    schema = form.get("schema") if isinstance(form, dict) else None
    if not isinstance(schema, dict):
        return []

    properties = []
    for prop in schema.values():
        if not isinstance(prop, dict):
            continue
        prop_type = prop.get("type")
        data_type = prop_type.get("dataType", "") if isinstance(prop_type, dict) else ""
        properties.append(
            FormProperty(
                id=str(prop.get("id") or ""),
                label=str(prop.get("label") or ""),
                data_type=str(data_type),
                constraints=_compact_json(prop.get("constraints")),
                default=_compact_json(prop.get("default")),
                value_list=_compact_json(prop.get("valueList")),
                signpost=str(prop.get("signpost") or ""),
            )
        )

    logger.debug(f"Loaded {len(properties)} form properties from {path}")
    return properties
