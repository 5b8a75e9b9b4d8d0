"""
HTML rendering of the generated Markdown documentation.

The HTML pages are converted from the same Markdown that is committed to the
repository, so both views always agree.
"""

import re

import markdown

from vro_docs.util.templates import TemplateLoader

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "md_in_html"]


def markdown_to_html(markdown_text: str) -> str:
    """
    Convert generated Markdown to an HTML fragment.

    ``<details>`` blocks are marked for Markdown processing so the tables
    and code inside the collapsible sections are rendered too.
    """
    text = markdown_text.replace("<details>", '<details markdown="1">')
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def render_html_page(markdown_text: str, title: str, loader: TemplateLoader) -> str:
    """
    Render a standalone HTML page from a Markdown document.

    Args:
        markdown_text: Markdown produced by the workflow or index templates
        title: Page title
        loader: Template loader holding ``page.html.j2``

    Returns:
        Complete HTML document
    """
    body = markdown_to_html(markdown_text)
    return loader.render("page.html.j2", {"title": title, "body": body})


def html_links(markdown_text: str) -> str:
    """Point ``.md`` links of the index at the matching ``.html`` pages."""
    return re.sub(r"\]\((\S+?)\.md\)", r"](\1.html)", markdown_text)
