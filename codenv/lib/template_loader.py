"""Template loading for hook messages.

Loads .md template files, strips an optional frontmatter block, and
interpolates variables with str.format(). Templates without variables are
returned untouched, so they may contain literal braces (code examples).

Exit behavior: Functions raise exceptions. Callers handle graceful degradation.
"""

from pathlib import Path
from typing import Any


def load_template(template_path: Path, variables: dict[str, Any] | None = None) -> str:
    """Load template and optionally format with variables.

    Args:
        template_path: Path to .md template file
        variables: Optional dict of variables to interpolate using str.format()

    Returns:
        Template content with frontmatter stripped and variables interpolated

    Raises:
        FileNotFoundError: If template file doesn't exist
        KeyError: If template references variable not in variables dict

    Example:
        >>> load_template(
        ...     Path("hooks/templates/cdn-reminder.md"),
        ...     {"file_path": "src/2_javascript/nav.js", "update_command": "..."},
        ... )
    """
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    content = _strip_frontmatter(template_path.read_text(encoding="utf-8"))

    if variables:
        content = content.format(**variables)

    return content


def _strip_frontmatter(content: str) -> str:
    """Strip a leading ---/--- frontmatter block.

    Only the first block is removed; later --- rules in the body are kept.
    Surrounding blank lines are trimmed.
    """
    if not content.startswith("---"):
        return content.strip("\n")

    first_newline = content.find("\n")
    if first_newline == -1:
        return ""
    rest = content[first_newline + 1 :]

    if "\n---\n" in rest:
        closing_idx = rest.index("\n---\n")
        return rest[closing_idx + 5 :].strip("\n")
    if rest.rstrip().endswith("---"):
        # Frontmatter only, no body
        return ""
    return content.strip("\n")
