"""
Template loading and rendering utilities using Jinja2.
"""

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

# Templates shipped inside the package
DEFAULT_TEMPLATES = Path(__file__).parent.parent / "templates"


class TemplateLoader:
    """
    Loads and renders Jinja2 templates.

    Supports custom templates in the project's ``templates/`` directory with
    fallback to the packaged defaults. Markdown templates are rendered
    verbatim; ``*.html.j2`` templates are autoescaped.
    """

    def __init__(self, project_root: Path, filters: dict[str, Callable[..., Any]] | None = None):
        """
        Initialize template loader.

        Args:
            project_root: Path to the repository holding the workflow exports
            filters: Extra Jinja2 filters to register on the environment
        """
        self.project_root = project_root
        self.project_templates = project_root / "templates"
        self.default_templates = DEFAULT_TEMPLATES
        self.filters = filters or {}
        self._env: Environment | None = None
        self._template_cache: dict[str, Template] = {}

    def has_custom_templates(self) -> bool:
        """Check if the project has custom templates."""
        return self.project_templates.exists()

    @property
    def env(self) -> Environment:
        """
        Get or create Jinja2 environment (cached).

        Returns:
            Cached Jinja2 Environment configured for template loading
        """
        if self._env is None:
            template_dirs = []

            if self.project_templates.exists():
                template_dirs.append(str(self.project_templates))

            if self.default_templates.exists():
                template_dirs.append(str(self.default_templates))

            if not template_dirs:
                raise FileNotFoundError("No template directories found")

            self._env = Environment(
                loader=FileSystemLoader(template_dirs),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
                autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            )
            self._env.filters.update(self.filters)

        return self._env

    def load_template(self, template_name: str) -> Template:
        """
        Load a Jinja2 template with caching.

        Args:
            template_name: Template name (e.g., "workflow.md.j2")

        Returns:
            Cached Jinja2 Template object
        """
        if template_name not in self._template_cache:
            self._template_cache[template_name] = self.env.get_template(template_name)

        return self._template_cache[template_name]

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template to a string."""
        return self.load_template(template_name).render(**context)

    def copy_default_templates_to_project(self) -> None:
        """
        Copy default templates to the project for customization.

        An existing ``templates/`` directory is moved to ``templates.backup``.
        """
        if not self.default_templates.exists():
            raise FileNotFoundError(f"Default templates not found at {self.default_templates}")

        if self.project_templates.exists():
            backup_dir = self.project_root / "templates.backup"
            if backup_dir.exists():
                shutil.rmtree(backup_dir)
            shutil.move(str(self.project_templates), str(backup_dir))

        shutil.copytree(str(self.default_templates), str(self.project_templates))
        self._env = None
        self._template_cache.clear()
