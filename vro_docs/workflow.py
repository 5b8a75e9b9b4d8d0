"""
vRealize Orchestrator workflow XML parser.

Reads a workflow export into plain dataclasses: inputs, outputs, workflow
variables (``<attrib>``), workflow items with their bindings and scripts,
and error handlers. Tags are matched by local name, so exports with the
default ``http://vmware.com/vco/workflow`` namespace, with a prefixed root,
or with no namespace at all parse the same way.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from lxml import etree

from vro_docs.exceptions import WorkflowNotFoundError, WorkflowParseError

NOT_AVAILABLE = "n/a"

_CDATA_OPEN = "<![CDATA["
_CDATA_CLOSE = "]]>"


@dataclass
class Parameter:
    """A workflow input, output or variable."""

    name: str
    type: str
    description: str | None = None
    read_only: bool = False
    line: int | None = None

    @property
    def is_constant(self) -> bool:
        """Constants are declared with type ``const`` or marked read-only."""
        return self.type == "const" or self.read_only


@dataclass
class Binding:
    """Binding between an element parameter and a workflow variable."""

    name: str
    type: str
    export_name: str


@dataclass
class WorkflowElement:
    """A ``<workflow-item>``: scriptable task, decision, link, end node..."""

    name: str
    item_type: str
    display_name: str | None = None
    description: str | None = None
    script: str | None = None
    in_bindings: list[Binding] = field(default_factory=list)
    out_bindings: list[Binding] = field(default_factory=list)
    out_name: str | None = None
    linked_workflow_id: str | None = None
    script_module: str | None = None
    line: int | None = None

    @property
    def title(self) -> str:
        return self.display_name or self.name or "unknown"


@dataclass
class ErrorHandler:
    name: str
    throw_bind_name: str | None = None


@dataclass
class LinkedWorkflow:
    name: str
    id: str


@dataclass
class EmbeddedScript:
    """JavaScript code of a scriptable task."""

    name: str
    code: str


@dataclass
class Workflow:
    """Parsed workflow export."""

    id: str
    name: str
    version: str
    description: str | None
    attributes: list[Parameter]
    inputs: list[Parameter]
    outputs: list[Parameter]
    elements: list[WorkflowElement]
    error_handlers: list[ErrorHandler]
    source_file: Path

    @property
    def linked_workflows(self) -> list[LinkedWorkflow]:
        """Workflows called through link elements."""
        return [
            LinkedWorkflow(name=el.title, id=el.linked_workflow_id)
            for el in self.elements
            if el.item_type == "link" and el.linked_workflow_id
        ]

    @property
    def linked_modules(self) -> list[str]:
        """Action modules referenced by elements, in document order."""
        return [el.script_module for el in self.elements if el.script_module]

    def scripts(self) -> list[EmbeddedScript]:
        """Scripts of every scriptable task that has code."""
        return [
            EmbeddedScript(name=el.title, code=el.script)
            for el in self.elements
            if el.item_type == "task" and el.script
        ]

    def meta(self) -> dict[str, Any]:
        """Short metadata record used by listings and indexes."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "attributes": self.attributes,
        }


def parse_workflow(xml_file: Path) -> Workflow:
    """
    Parse a vRealize workflow XML export.

    Args:
        xml_file: Path to workflow XML file

    Returns:
        Workflow with every section populated (empty lists when absent)

    Raises:
        WorkflowNotFoundError: If the file doesn't exist
        WorkflowParseError: If the XML is malformed

    Example:
        >>> wf = parse_workflow(Path("Create AVI Load Balancer.workflow.xml"))
        >>> [p.name for p in wf.inputs]
        ['vsName', 'poolMembers']
    """
    xml_file = Path(xml_file)
    if not xml_file.is_file():
        raise WorkflowNotFoundError(str(xml_file))

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
    try:
        tree = etree.parse(str(xml_file), parser)
    except etree.XMLSyntaxError as e:
        raise WorkflowParseError(str(xml_file), str(e)) from e

    root = tree.getroot()

    display_name = _child_text(root, "display-name")
    name = display_name or root.get("object-name") or xml_file.name

    return Workflow(
        id=root.get("id") or NOT_AVAILABLE,
        name=name,
        version=root.get("version") or NOT_AVAILABLE,
        description=_child_text(root, "description"),
        attributes=[_parse_parameter(a) for a in _children(root, "attrib")],
        inputs=_parse_param_block(root, "input"),
        outputs=_parse_param_block(root, "output"),
        elements=[_parse_element(item) for item in _children(root, "workflow-item")],
        error_handlers=[
            ErrorHandler(name=eh.get("name", ""), throw_bind_name=eh.get("throw-bind-name"))
            for eh in _children(root, "error-handler")
        ],
        source_file=xml_file,
    )


def _local_name(elem: etree._Element) -> str:
    return etree.QName(elem).localname


def _children(elem: etree._Element, tag: str) -> Iterator[etree._Element]:
    """Direct child elements with the given local name."""
    for child in elem:
        if isinstance(child.tag, str) and _local_name(child) == tag:
            yield child


def _child(elem: etree._Element, tag: str) -> etree._Element | None:
    return next(_children(elem, tag), None)


def _child_text(elem: etree._Element, tag: str) -> str | None:
    """Stripped text of the first matching child, None when empty or missing."""
    child = _child(elem, tag)
    if child is None:
        return None
    text = _strip_cdata("".join(child.itertext())).strip()
    return text or None


def _strip_cdata(text: str) -> str:
    # Some exports escape the CDATA section, leaving the markers in the text
    stripped = text.strip()
    if stripped.startswith(_CDATA_OPEN) and stripped.endswith(_CDATA_CLOSE):
        return stripped[len(_CDATA_OPEN) : -len(_CDATA_CLOSE)]
    return text


def _parse_param_block(root: etree._Element, tag: str) -> list[Parameter]:
    params = []
    for block in _children(root, tag):
        params.extend(_parse_parameter(p) for p in _children(block, "param"))
    return params


def _parse_parameter(elem: etree._Element) -> Parameter:
    return Parameter(
        name=elem.get("name", ""),
        type=elem.get("type", ""),
        description=_child_text(elem, "description"),
        read_only=elem.get("read-only", "").lower() == "true",
        line=elem.sourceline,
    )


def _parse_bindings(elem: etree._Element, tag: str) -> list[Binding]:
    bindings = []
    for block in _children(elem, tag):
        for bind in _children(block, "bind"):
            bindings.append(
                Binding(
                    name=bind.get("name", ""),
                    type=bind.get("type", ""),
                    export_name=bind.get("export-name", ""),
                )
            )
    return bindings


def _parse_element(elem: etree._Element) -> WorkflowElement:
    script = _child_text(elem, "script")

    return WorkflowElement(
        name=elem.get("name", ""),
        item_type=elem.get("type", ""),
        display_name=_child_text(elem, "display-name"),
        description=_child_text(elem, "description"),
        script=script,
        in_bindings=_parse_bindings(elem, "in-binding"),
        out_bindings=_parse_bindings(elem, "out-binding"),
        out_name=elem.get("out-name"),
        linked_workflow_id=elem.get("linked-workflow-id"),
        script_module=elem.get("script-module"),
        line=elem.sourceline,
    )
