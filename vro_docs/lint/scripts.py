"""
ESLint integration for scripts embedded in workflow exports.

Each scriptable task is piped to ESLint on stdin and reported against a
virtual path ``<workflow file>#<task name>.js``.
"""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vro_docs.exceptions import LinterNotAvailableError, LintExecutionError
from vro_docs.workflow import parse_workflow

logger = logging.getLogger(__name__)

ESLINT_TIMEOUT = 60

SEVERITY_NAMES = {2: "error", 1: "warning"}


@dataclass
class EslintResult:
    """ESLint result for one embedded script."""

    file_path: str
    messages: list[dict[str, Any]] = field(default_factory=list)
    error_count: int = 0
    warning_count: int = 0

    @property
    def success(self) -> bool:
        return self.error_count == 0

    def get_messages_by_severity(self) -> dict[str, list[dict[str, Any]]]:
        """
        Group messages by severity.

        Returns:
            Dict mapping severity (error/warning) to messages
        """
        by_severity: dict[str, list[dict[str, Any]]] = {"error": [], "warning": []}
        for message in self.messages:
            by_severity[SEVERITY_NAMES.get(message.get("severity", 1), "warning")].append(message)
        return by_severity


def find_eslint(root: Path | None = None) -> str | None:
    """
    Locate the ESLint executable.

    A project-local ``node_modules/.bin/eslint`` wins over one on PATH.
    """
    if root is not None:
        local = Path(root) / "node_modules" / ".bin" / "eslint"
        if local.exists():
            return str(local)
    return shutil.which("eslint")


def is_eslint_available(root: Path | None = None) -> bool:
    """
    Check if ESLint is installed and available.

    Returns:
        True if ESLint is available, False otherwise
    """
    return find_eslint(root) is not None


def virtual_path(xml_file: str | Path, script_name: str) -> str:
    """Path ESLint reports an embedded script under."""
    return f"{xml_file}#{script_name}.js"


def run_eslint(
    code: str,
    file_path: str,
    config_file: Path | None = None,
    root: Path | None = None,
) -> EslintResult:
    """
    Run ESLint on one script passed through stdin.

    Args:
        code: JavaScript source
        file_path: Virtual file path used in ESLint's report
        config_file: Optional ESLint config file
        root: Working directory for ESLint (config lookup starts there)

    Returns:
        EslintResult for the script

    Raises:
        LinterNotAvailableError: If ESLint is not installed
        LintExecutionError: If ESLint fails, times out or returns unusable output
    """
    eslint = find_eslint(root)
    if eslint is None:
        raise LinterNotAvailableError()

    cmd = [eslint, "--format", "json", "--stdin", "--stdin-filename", file_path]
    if config_file is not None:
        cmd.extend(["--config", str(config_file)])

    try:
        result = subprocess.run(
            cmd,
            input=code,
            capture_output=True,
            text=True,
            timeout=ESLINT_TIMEOUT,
            cwd=str(root) if root is not None else None,
        )
    except subprocess.TimeoutExpired:
        raise LintExecutionError(f"timed out after {ESLINT_TIMEOUT}s on {file_path}")

    # ESLint exits with 0 (clean), 1 (lint errors) or 2 (fatal: bad config, crash)
    if result.returncode not in (0, 1):
        raise LintExecutionError(result.stderr.strip() or f"exit code {result.returncode}")

    try:
        reports = json.loads(result.stdout) if result.stdout.strip() else []
    except json.JSONDecodeError as e:
        raise LintExecutionError(f"unparsable output for {file_path}: {e}") from e

    lint_result = EslintResult(file_path=file_path)
    for report in reports:
        lint_result.messages.extend(report.get("messages", []))
        lint_result.error_count += report.get("errorCount", 0) + report.get("fatalErrorCount", 0)
        lint_result.warning_count += report.get("warningCount", 0)

    return lint_result


def lint_workflow_scripts(
    paths: list[Path],
    config_file: Path | None = None,
    root: Path | None = None,
) -> list[EslintResult]:
    """
    Lint every embedded task script of the given workflow files.

    Args:
        paths: Workflow XML files
        config_file: Optional ESLint config file
        root: Repository root; virtual paths are relative to it

    Returns:
        One EslintResult per script
    """
    results = []
    for path in paths:
        workflow = parse_workflow(path)
        display = path
        if root is not None:
            try:
                display = path.resolve().relative_to(Path(root).resolve())
            except ValueError:
                pass

        for script in workflow.scripts():
            file_path = virtual_path(display, script.name)
            logger.debug(f"Linting {file_path}")
            results.append(run_eslint(script.code, file_path, config_file, root))

    return results


def format_stylish(results: list[EslintResult]) -> str:
    """
    Format results the way ESLint's ``stylish`` formatter does.

    Scripts without messages are left out.
    """
    lines = []
    total_errors = 0
    total_warnings = 0

    for result in results:
        if not result.messages:
            continue
        lines.append(result.file_path)
        for message in result.messages:
            severity = SEVERITY_NAMES.get(message.get("severity", 1), "warning")
            position = f"{message.get('line', 0)}:{message.get('column', 0)}"
            rule = message.get("ruleId") or ""
            lines.append(f"  {position:>8}  {severity:<7}  {message.get('message', '')}  {rule}")
        lines.append("")
        total_errors += result.error_count
        total_warnings += result.warning_count

    if total_errors or total_warnings:
        total = total_errors + total_warnings
        lines.append(
            f"✖ {total} problem(s) ({total_errors} error(s), {total_warnings} warning(s))"
        )

    return "\n".join(lines)
