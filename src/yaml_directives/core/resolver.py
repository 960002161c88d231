"""Tag resolution engine.

Walks a composed YAML tree and replaces every node carrying a registered
directive tag with the node produced by the directive. Containers are
rebuilt in place, keeping order; nodes without a registered tag are left
unchanged.
"""

from typing import TYPE_CHECKING

from yaml.nodes import MappingNode, SequenceNode

if TYPE_CHECKING:
    from yaml.nodes import Node

if TYPE_CHECKING:
    from yaml_directives.context import ResolutionContext


def resolve_tags(node: 'Node', context: 'ResolutionContext',
                 memo: dict[int, 'Node'] | None = None) -> 'Node':
    """Resolve directive tags in a node tree.

    A tagged node is handed to its directive and the result is returned
    as is: the directive resolves the fragment it produces. Sequence and
    mapping children (keys before values) are resolved depth-first and
    the first error aborts the walk.

    PyYAML composes aliases into shared node objects, so a node may be
    reached more than once. Each node is resolved once per pass and
    every later reference receives the same replacement.

    Args:
        node: Root of the tree to resolve. Containers are modified in place.
        context: Resolution context providing the directive table.
        memo: Nodes already resolved in this pass, keyed by identity.

    Returns:
        The resolved node.
    """
    if memo is None:
        memo = {}

    if (resolved := memo.get(id(node))) is not None:
        return resolved

    if (directive := context.lookup(node.tag)) is not None:
        memo[id(node)] = replacement = directive(node, context)
        return replacement

    memo[id(node)] = node

    if isinstance(node, SequenceNode):
        for index, item in enumerate(node.value):
            node.value[index] = resolve_tags(item, context, memo)

    elif isinstance(node, MappingNode):
        for index, (key, value) in enumerate(node.value):
            key = resolve_tags(key, context, memo)  # noqa: PLW2901
            node.value[index] = (key, resolve_tags(value, context, memo))

    return node
