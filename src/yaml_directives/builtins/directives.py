"""Built-in directives for external content.

Each directive reads a raw string keyed by the scalar text of the tagged
node, parses it as a standalone YAML fragment and returns the fragment
root after it has been resolved too, so directives compose and nest:
an included file may use `!env`, `!var` or further `!include` tags.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from yaml_directives.errors import DirectiveResourceError, DirectiveValueError
from yaml_directives.extensions import Directive

if TYPE_CHECKING:
    from yaml.nodes import Node, ScalarNode

if TYPE_CHECKING:
    from yaml_directives.context import ResolutionContext


def include_resolver(node: 'ScalarNode', context: 'ResolutionContext') -> 'Node':
    """Replace a node with the contents of a YAML file.

    The scalar is a path, absolute or relative to the working directory.

    Args:
        node: Scalar node containing a file path.
        context: Resolution context of the current load.

    Returns:
        Root node of the resolved file contents.

    Raises:
        DirectiveResourceError: If the path is invalid or the file
            cannot be read.
        DirectiveRecursionError: If the file is already being included.
        DirectiveParseError: If the file is not well-formed YAML.
    """
    path = Path(node.value)

    try:
        absolute = path.resolve()

    except (OSError, ValueError) as base:
        raise DirectiveResourceError.from_yaml_node(str(base), node, base) from base

    with context.including(absolute):
        try:
            content = absolute.read_bytes()

        except (OSError, ValueError) as base:
            raise DirectiveResourceError.from_yaml_node(str(base), node, base) from base

        return context.compose_fragment(content, name=str(path)).node


def env_resolver(node: 'ScalarNode', context: 'ResolutionContext') -> 'Node':
    """Replace a node with the value of an environment variable.

    An empty value is treated the same as an unset variable.

    Args:
        node: Scalar node containing a variable name.
        context: Resolution context of the current load.

    Returns:
        Root node of the resolved variable value.

    Raises:
        DirectiveValueError: If the variable is unset or empty.
        DirectiveParseError: If the value is not well-formed YAML.
    """
    name = node.value

    value = context.environ.get(name)
    if not value:
        raise DirectiveValueError.from_yaml_node(f'environment variable {name} not set', node)

    return context.compose_fragment(value, name=f'<env {name}>').node


def variable_resolver(node: 'ScalarNode', context: 'ResolutionContext') -> 'Node':
    """Replace a node with the value of a caller variable.

    Args:
        node: Scalar node containing a variable name.
        context: Resolution context of the current load.

    Returns:
        Root node of the resolved variable value.

    Raises:
        DirectiveValueError: If the variable is not in the variable table.
        DirectiveParseError: If the value is not well-formed YAML.
    """
    name = node.value

    value = context.variables.get(name)
    if value is None:
        raise DirectiveValueError.from_yaml_node(f'variable {name} not set', node)

    return context.compose_fragment(value, name=f'<var {name}>').node


#: Directive for `!include <path>`.
include = Directive(tag='!include', resolver=include_resolver)

#: Directive for `!env <name>` (empty values count as unset).
env = Directive(tag='!env', resolver=env_resolver)

#: Directive for `!var <name>` (names come from `key=value` load arguments).
variable = Directive(tag='!var', resolver=variable_resolver)
