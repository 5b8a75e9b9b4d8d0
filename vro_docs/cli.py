"""
CLI entry point for vro-docs.
"""

import json
import logging
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from vro_docs.exceptions import RetryableError, VroDocsError, format_error_for_cli
from vro_docs.workspace import CONFIG_FILENAME, Workspace

app = typer.Typer(
    name="vro-docs",
    help="Documentation, validation and CI tooling for vRealize Orchestrator workflow exports",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except VroDocsError as e:
            err_console.print(format_error_for_cli(e))
            raise typer.Exit(1)
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
            err_console.print("[yellow]This may be a bug. Re-run with --verbose for details.[/yellow]")
            raise typer.Exit(1)

    return wrapper


def _load_config() -> dict:
    return Workspace(Path.cwd()).load_config()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Documentation, validation and CI tooling for vRealize Orchestrator workflow exports."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
@handle_errors
def init(
    project_dir: str = typer.Argument(".", help="Repository holding the workflow exports"),
    with_templates: bool = typer.Option(
        False, "--with-templates", help="Copy default templates for customization"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing configuration"),
):
    """Write a default vro-docs.yaml configuration."""
    workspace = Workspace(Path(project_dir))
    if workspace.config_file.exists() and not force:
        console.print(f"[yellow]⚠ {workspace.config_file} already exists[/yellow]")
        console.print("[dim]  Use --force to overwrite it[/dim]")
        raise typer.Exit(1)

    workspace.initialize()
    console.print(f"[green]✓ Wrote configuration to {CONFIG_FILENAME}[/green]")

    if with_templates:
        from vro_docs.docs.render import create_loader

        loader = create_loader(workspace.root)
        try:
            loader.copy_default_templates_to_project()
            console.print("[green]✓ Copied default templates to templates/[/green]")
            console.print("[dim]  You can now customize the generated documentation[/dim]")
        except FileNotFoundError as e:
            console.print(f"[yellow]⚠ Template directory not found: {e}[/yellow]")
            logger.warning(f"Templates not found: {e}")
        except PermissionError as e:
            console.print(f"[red]✗ Permission denied copying templates: {e}[/red]")
            raise typer.Exit(1)

    console.print("\n[dim]Next steps:[/dim]")
    if project_dir != ".":
        console.print(f"  cd {project_dir}")
    console.print("  vro-docs docs")


@app.command()
@handle_errors
def docs(
    glob: str | None = typer.Option(None, "--glob", help="Workflow glob (default: **/*workflow.xml)"),
    out: Path | None = typer.Option(None, "--out", help="Output directory (default: docs/workflows)"),
    html: bool | None = typer.Option(None, "--html/--no-html", help="Also write HTML pages"),
    index: bool | None = typer.Option(None, "--index/--no-index", help="Write README index"),
):
    """Generate Markdown documentation for every workflow export."""
    from vro_docs.docs import discover_workflows, generate_docs
    from vro_docs.util.progress import track_progress

    config = _load_config()
    root = Path.cwd()
    pattern = glob or config["workflows"]["glob"]
    out_dir = out or Path(config["docs"]["out_dir"])
    write_html = config["docs"]["html"] if html is None else html
    write_index = config["docs"]["index"] if index is None else index

    total = len(discover_workflows(root, pattern))
    console.print(f"📝  Generating docs for {total} workflow(s)\n")

    with track_progress("Rendering", total=total) as (progress, task):

        def on_file(path: Path) -> None:
            progress.update(task, description=f"Rendering {path.name}", advance=1)

        result = generate_docs(
            root, out_dir, pattern=pattern, html=write_html, index=write_index, on_file=on_file
        )

    for path in result.written:
        shown = path.relative_to(root) if path.is_relative_to(root) else path
        console.print(f"[green]✔  {escape(str(shown))}[/green]")

    for path, message in result.failures:
        console.print(f"[red]✗  {escape(str(path))}: {escape(message)}[/red]")

    if result.failures:
        console.print(
            f"\n[red]Documentation generated with {len(result.failures)} failure(s)[/red]"
        )
        raise typer.Exit(1)

    console.print("\n[green]✅  Documentation generated (XML + local form JSON)[/green]")


@app.command()
@handle_errors
def validate(
    glob: str | None = typer.Option(None, "--glob", help="Workflow glob (default: **/*workflow.xml)"),
    output_format: str = typer.Option("text", "--format", help="Output format (text|json)"),
):
    """Check naming conventions and element descriptions."""
    from vro_docs.docs import discover_workflows
    from vro_docs.lint.naming import validate_files

    if output_format not in ("text", "json"):
        err_console.print("[red]Error:[/red] --format must be 'text' or 'json'")
        raise typer.Exit(2)

    config = _load_config()
    root = Path.cwd()
    pattern = glob or config["workflows"]["glob"]
    files = discover_workflows(root, pattern)

    violations = validate_files(files, base=root)

    if output_format == "json":
        typer.echo(
            json.dumps(
                {"files": len(files), "violations": [v.to_dict() for v in violations]}, indent=2
            )
        )
    else:
        console.print(f"🔍  Validating variables & descriptions: pattern = {escape(pattern)}")
        console.print(f"    ➜  {len(files)} workflow file(s) found\n")
        for violation in violations:
            console.print(f"[red]{escape(violation.location())}[/red]: {escape(violation.message)}")

    if violations:
        if output_format == "text":
            console.print(f"\n[red]Validation failed with {len(violations)} violation(s).[/red]")
        raise typer.Exit(1)

    if output_format == "text":
        console.print("[green]All variables & descriptions are valid.[/green]")


@app.command()
@handle_errors
def lint(
    glob: str | None = typer.Option(None, "--glob", help="Workflow glob (default: vro-samples/**/*.xml)"),
    eslint_config: Path | None = typer.Option(None, "--eslint-config", help="ESLint config file"),
):
    """Lint the JavaScript embedded in scriptable tasks with ESLint."""
    from vro_docs.docs import discover_workflows
    from vro_docs.lint.scripts import format_stylish, lint_workflow_scripts

    config = _load_config()
    root = Path.cwd()
    pattern = glob or config["lint"]["glob"]
    if eslint_config is None and config["lint"]["eslint_config"]:
        eslint_config = Path(config["lint"]["eslint_config"])

    files = discover_workflows(root, pattern)
    if not files:
        console.print(f"[yellow]No workflow files match {escape(pattern)}[/yellow]")
        return

    results = lint_workflow_scripts(files, config_file=eslint_config, root=root)

    report = format_stylish(results)
    if report:
        typer.echo(report)

    if any(not r.success for r in results):
        console.print("[red]✖ ESLint errors found[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✔ All embedded scripts pass ESLint[/green] ({len(results)} script(s))")


@app.command(name="find-workflows")
@handle_errors
def find_workflows(
    root: Path = typer.Option(Path("."), "--root", help="Directory to search"),
    output_name: str = typer.Option("matrix", "--output-name", help="GitHub step output name"),
):
    """Print a CI matrix of every XML file with a root workflow id."""
    from vro_docs.discover import build_matrix, find_workflow_ids, write_github_output

    found = find_workflow_ids(root)
    matrix = build_matrix(found)

    typer.echo(json.dumps(matrix))
    err_console.print(f"Found workflow ID: {escape(str([x['id'] for x in found]))}")

    if write_github_output(output_name, matrix):
        err_console.print(f"[green]✓ Wrote {output_name} to GITHUB_OUTPUT[/green]")


@app.command()
@handle_errors
def trigger(
    branch: str = typer.Option(
        ..., "--branch", envvar="GITHUB_HEAD_REF", help="Branch the runner should document"
    ),
    workflow_id: str | None = typer.Option(None, "--workflow-id", help="Workflow to document"),
    all_workflows: bool = typer.Option(
        False, "--all", help="Document every workflow found under --root"
    ),
    root: Path = typer.Option(Path("."), "--root", help="Directory searched by --all"),
    runner_id: str | None = typer.Option(None, "--runner-id", help="Runner workflow id"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification"),
):
    """Trigger the documentation runner workflow on vRealize Automation."""
    from vro_docs.discover import find_workflow_ids
    from vro_docs.util.progress import show_summary
    from vro_docs.vra import VraClient, credentials_from_env, trigger_documentation_run

    if bool(workflow_id) == all_workflows:
        err_console.print("[red]Error:[/red] pass exactly one of --workflow-id or --all")
        raise typer.Exit(2)

    config = _load_config()
    vra_config = config["vra"]
    credentials = credentials_from_env(vra_config["url"])

    if all_workflows:
        workflow_ids = [found["id"] for found in find_workflow_ids(root)]
        if not workflow_ids:
            console.print("[yellow]No workflows with an id found[/yellow]")
            return
    else:
        workflow_ids = [workflow_id]

    client = VraClient(
        credentials.url,
        verify_ssl=vra_config["verify_ssl"] and not insecure,
        timeout=vra_config["timeout"],
    )
    client.authenticate(credentials.username, credentials.password)
    console.print("[green]✓ Authenticated[/green]")

    failed = []
    for target in workflow_ids:
        console.print(f"Processing workflowID: {escape(target)}")
        try:
            execution = trigger_documentation_run(
                client,
                target,
                branch,
                runner_workflow_id=runner_id or vra_config["runner_workflow_id"],
                attempts=vra_config["retry_attempts"],
                delay=vra_config["retry_delay"],
            )
        except RetryableError as e:
            console.print(f"[red]✗ Failed after {e.max_attempts} attempts: {escape(e.message)}[/red]")
            failed.append(target)
            continue

        console.print(
            f"[green]✓ Triggered (code: {execution.status_code}, "
            f"execution: {execution.execution_id or 'n/a'})[/green]"
        )

    show_summary(
        "vRO executions",
        {
            "Branch": branch,
            "Triggered": len(workflow_ids) - len(failed),
            "Failed": len(failed),
        },
    )

    if failed:
        raise typer.Exit(1)


@app.command()
@handle_errors
def publish(
    head_ref: str = typer.Option(
        ..., "--head-ref", envvar="GITHUB_HEAD_REF", help="Pull request source branch"
    ),
    docs_dir: str | None = typer.Option(None, "--docs-dir", help="Directory with generated docs"),
    push: bool = typer.Option(True, "--push/--no-push", help="Push the documentation branch"),
):
    """Commit generated docs on <head-ref>-documentation and push it."""
    from vro_docs.publish import documentation_branch, publish_docs

    config = _load_config()
    publish_config = config["publish"]
    branch = documentation_branch(head_ref, publish_config["branch_suffix"])

    committed = publish_docs(
        Path.cwd(),
        head_ref,
        docs_dir or config["docs"]["out_dir"],
        push=push,
        branch_suffix=publish_config["branch_suffix"],
        commit_message=publish_config["commit_message"],
        user_name=publish_config["user_name"],
        user_email=publish_config["user_email"],
    )

    if not committed:
        console.print("[yellow]No docs changes to commit, skipping push[/yellow]")
        return

    console.print(f"[green]✓ Committed documentation on {escape(branch)}[/green]")
    if push:
        console.print(f"[green]✓ Pushed {escape(branch)} to origin[/green]")


if __name__ == "__main__":
    app()
