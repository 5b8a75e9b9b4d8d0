"""
Naming and description rules for workflow exports.

- Inputs, outputs and workflow variables use lowerCamelCase.
- Constants use UPPER_CASE. A constant is declared with type ``const`` or
  marked ``read-only="true"``.
- Every workflow item carries a non-empty ``<description>``.
"""

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from vro_docs.exceptions import WorkflowError
from vro_docs.workflow import Parameter, Workflow, parse_workflow

CAMEL_CASE_RE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
UPPER_CASE_RE = re.compile(r"^[A-Z0-9_]+$")

RULE_NAMING = "naming"
RULE_DESCRIPTION = "description"
RULE_PARSE = "parse"


@dataclass
class Violation:
    """A single rule violation."""

    file: str
    line: int | None
    rule: str
    subject: str
    message: str

    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def is_valid_name(name: str, constant: bool) -> bool:
    """Check a name against the camelCase or UPPER_CASE convention."""
    pattern = UPPER_CASE_RE if constant else CAMEL_CASE_RE
    return bool(pattern.match(name))


def _display_path(path: Path, base: Path | None) -> str:
    if base is not None:
        try:
            return str(path.resolve().relative_to(base.resolve()))
        except ValueError:
            pass
    return str(path)


def check_parameter(param: Parameter, file: str) -> Violation | None:
    constant = param.is_constant
    if is_valid_name(param.name, constant):
        return None
    expected = "UPPER_CASE" if constant else "camelCase"
    return Violation(
        file=file,
        line=param.line,
        rule=RULE_NAMING,
        subject=param.name,
        message=f'invalid name "{param.name}" (expected {expected})',
    )


def validate_workflow(workflow: Workflow, base: Path | None = None) -> list[Violation]:
    """
    Validate naming conventions and element descriptions of one workflow.

    Args:
        workflow: Parsed workflow
        base: Directory that reported file paths are made relative to

    Returns:
        Violations in document order: parameters first, then elements
    """
    file = _display_path(workflow.source_file, base)
    violations = []

    for param in [*workflow.inputs, *workflow.outputs, *workflow.attributes]:
        violation = check_parameter(param, file)
        if violation:
            violations.append(violation)

    for element in workflow.elements:
        if not element.description:
            name = element.name or element.display_name or "unknown"
            violations.append(
                Violation(
                    file=file,
                    line=element.line,
                    rule=RULE_DESCRIPTION,
                    subject=name,
                    message=f'workflow-item "{name}" is missing <description>',
                )
            )

    return violations


def validate_files(paths: list[Path], base: Path | None = None) -> list[Violation]:
    """
    Validate every workflow file.

    Files that cannot be parsed are reported as ``parse`` violations so a
    broken export fails validation instead of being skipped.
    """
    violations: list[Violation] = []
    for path in paths:
        try:
            workflow = parse_workflow(path)
        except WorkflowError as e:
            violations.append(
                Violation(
                    file=_display_path(path, base),
                    line=None,
                    rule=RULE_PARSE,
                    subject=path.name,
                    message=e.message,
                )
            )
            continue
        violations.extend(validate_workflow(workflow, base))
    return violations
