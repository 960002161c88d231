"""Directive tags and variable assignment primitives.

This module defines the tag type accepted by the directive registry and
the helper that turns `key=value` assignments into a variable table.
"""

from typing import TYPE_CHECKING, Annotated

from pydantic import Field

if TYPE_CHECKING:
    from collections.abc import Iterable

#: Base pattern for directive tags.
#: Any non-empty tag without whitespace is accepted (`!include`, `!my.tag`,
#: `tag:example.com,2024:thing`).
_TAG_PATTERN = r'\S+'

#: Separator between a variable name and its value.
ASSIGNMENT_SEPARATOR = '='


Tag = Annotated[
    str, Field(
        min_length=1,
        pattern=rf'^{_TAG_PATTERN}$',
        title='Directive tag',
        description=(
            'YAML tag that triggers the directive, including its leading '
            'exclamation mark for local tags (for example, `!include`). '
            'Tags must be non-empty and may not contain whitespace, '
            'which YAML does not allow in tags either. '
            'Tags are matched exactly.'
        ),
        examples=[
            '!include',
            '!env',
            '!var',
        ],
    ),
]


def parse_variables(assignments: 'Iterable[str]') -> dict[str, str]:
    """Build a variable table from `key=value` assignments.

    Each entry is split on the first `=`. Entries without a separator
    are silently dropped; later assignments of the same name win.

    Args:
        assignments: Raw assignments, usually taken from process arguments.

    Returns:
        A new mapping of variable names to their raw string values.
    """
    variables: dict[str, str] = {}

    for assignment in assignments:
        name, separator, value = assignment.partition(ASSIGNMENT_SEPARATOR)
        if separator:
            variables[name] = value

    return variables
