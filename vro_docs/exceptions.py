"""
Custom exceptions for vro-docs with helpful error messages.
"""

from rich.markup import escape


class VroDocsError(Exception):
    """Base exception for vro-docs errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class WorkflowError(VroDocsError):
    """Errors related to reading workflow exports."""

    pass


class WorkflowNotFoundError(WorkflowError):
    """Workflow file not found."""

    def __init__(self, file_path: str):
        message = f"Workflow file not found: {file_path}"
        suggestion = (
            "Check that the file path is correct and the file exists:\n" f"  ls -l {file_path}"
        )
        super().__init__(message, suggestion)


class WorkflowParseError(WorkflowError):
    """Workflow XML could not be parsed."""

    def __init__(self, file_path: str, details: str):
        self.file_path = file_path
        message = f"Invalid workflow XML in {file_path}: {details}"
        suggestion = (
            "Re-export the workflow from vRealize Orchestrator, or check the file\n"
            "for merge conflict markers and truncated content."
        )
        super().__init__(message, suggestion)


class LintError(VroDocsError):
    """Errors while linting embedded scripts."""

    pass


class LinterNotAvailableError(LintError):
    """ESLint is not installed."""

    def __init__(self):
        message = "ESLint is not installed or not on PATH."
        suggestion = (
            "Install ESLint in the repository:\n"
            "  npm install --save-dev eslint @eslint/js\n\n"
            "Then make sure node_modules/.bin is on PATH, or install it globally:\n"
            "  npm install -g eslint"
        )
        super().__init__(message, suggestion)


class LintExecutionError(LintError):
    """ESLint ran but its output could not be used."""

    def __init__(self, details: str):
        message = f"ESLint execution failed: {details}"
        suggestion = "Run ESLint by hand on one extracted script to see the full error."
        super().__init__(message, suggestion)


class VraError(VroDocsError):
    """Errors talking to the vRealize Automation API."""

    pass


class MissingCredentialsError(VraError):
    """vRA connection settings are missing."""

    def __init__(self, missing: list[str]):
        missing_list = ", ".join(missing)
        message = f"Missing vRA connection settings: {missing_list}"
        suggestion = (
            "Export the connection settings before triggering workflows:\n"
            "  export VRA_URL=https://vra.example.com\n"
            "  export VRA_USER=<user>\n"
            "  export VRA_PASSWORD=<password>\n\n"
            "VRA_URL may also be set as vra.url in vro-docs.yaml."
        )
        super().__init__(message, suggestion)


class VraAuthenticationError(VraError):
    """Login or token exchange failed."""

    def __init__(self, step: str, details: str):
        message = f"vRA authentication failed during {step}: {details}"
        suggestion = (
            "Check VRA_USER and VRA_PASSWORD, and that VRA_URL points at the\n"
            "vRA appliance. Use --insecure if it serves a self-signed certificate."
        )
        super().__init__(message, suggestion)


class VraExecutionError(VraError):
    """Workflow execution request was rejected."""

    def __init__(self, workflow_id: str, status_code: int, body: str):
        self.workflow_id = workflow_id
        self.status_code = status_code
        self.body = body
        message = f"Execution of workflow {workflow_id} failed (code: {status_code}): {body}"
        super().__init__(message)


class GitCommandError(VroDocsError):
    """A git command failed."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        message = f"git command failed ({returncode}): {' '.join(command)}"
        if stderr:
            message += f"\n{stderr.strip()}"
        suggestion = "Check that the working directory is a git repository with a push remote."
        super().__init__(message, suggestion)


class ConfigurationError(VroDocsError):
    """Configuration file errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid."""

    def __init__(self, error_details: str):
        message = f"Invalid configuration file: {error_details}"

        suggestion = (
            "Fix the vro-docs.yaml file.\n"
            "You can regenerate the default configuration:\n"
            "  mv vro-docs.yaml vro-docs.yaml.backup\n"
            "  vro-docs init .\n\n"
            "Then merge your settings back from the backup."
        )
        super().__init__(message, suggestion)


class RetryableError(VroDocsError):
    """Error that should be retried."""

    def __init__(self, original_error: Exception, attempt: int, max_attempts: int):
        self.original_error = original_error
        self.attempt = attempt
        self.max_attempts = max_attempts

        message = f"Operation failed (attempt {attempt}/{max_attempts}): " f"{str(original_error)}"
        super().__init__(message)


def format_error_for_cli(error: Exception) -> str:
    """
    Format an exception for CLI display with helpful information.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, VroDocsError):
        output = f"[red]Error:[/red] {escape(error.message)}"
        if error.suggestion:
            output += f"\n\n[yellow]{escape(error.suggestion)}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {escape(str(error))}"
