"""
Prompt template rendering.
"""

import re

PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render_template(template: str, **kwargs: str) -> str:
    """Render a template string, leaving unresolved vars as-is.

    Only ``{name}`` placeholders matching a keyword are replaced, so literal
    JSON braces in a template need no escaping. Substitution is a single
    pass: braces inside an inserted value are never expanded.
    """

    def substitute(match: re.Match) -> str:
        key = match.group(1)
        return str(kwargs[key]) if key in kwargs else match.group(0)

    return PLACEHOLDER.sub(substitute, template)
