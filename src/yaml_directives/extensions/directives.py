"""Declarative directive definitions.

A directive binds a YAML tag to a resolver: a callable that receives the
tagged node together with the current resolution context and returns the
node that replaces it in the document tree.

Directive objects are declarative and immutable. They check that the
tagged node is of the accepted kind before delegating to the resolver,
so resolvers only deal with the nodes they were written for.
"""

from collections.abc import Callable
from typing import Literal

from pydantic import Field
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from yaml_directives.context import ResolutionContext
from yaml_directives.errors import DirectiveStructureError
from yaml_directives.models import SchemaModel
from yaml_directives.names import Tag  # noqa: TC001

#: The resolver is invoked by the resolution engine with a tagged node and
#: is responsible for producing the replacement node (usually a fragment
#: composed through `ResolutionContext.compose_fragment`).
type DirectiveResolver = Callable[[Node, ResolutionContext], Node]

#: Node kinds a directive may be attached to.
type NodeType = Literal['scalar', 'sequence', 'mapping', 'any']

NODE_CLASSES: dict[str, type[Node]] = {
    'scalar': ScalarNode,
    'sequence': SequenceNode,
    'mapping': MappingNode,
}


class Directive(SchemaModel):
    """Declarative directive definition.

    Defines a YAML tag, the kind of node it may be attached to, and the
    resolver producing the replacement node.
    """

    tag: Tag = Field(
        title='Directive tag',
        description='YAML tag matched exactly against tagged nodes.',
    )

    node_type: NodeType = Field(
        default='scalar',
        title='Node type',
        description=(
            'Kind of node the directive may be attached to. '
            'Attaching the tag to any other kind is a structural error.'
        ),
    )

    resolver: DirectiveResolver = Field(
        title='Resolver',
        description='Callable producing the replacement node for a tagged node.',
    )

    def accepts(self, node: Node) -> bool:
        """Check whether the directive may be attached to a node."""
        if self.node_type == 'any':
            return True

        return isinstance(node, NODE_CLASSES[self.node_type])

    def __call__(self, node: Node, context: ResolutionContext) -> Node:
        """Resolve a tagged node.

        Args:
            node: Node carrying the directive tag.
            context: Resolution context of the current load.

        Returns:
            The replacement node.

        Raises:
            DirectiveStructureError: If the node kind is not accepted or
                the resolver does not return a YAML node.
        """
        if not self.accepts(node):
            raise DirectiveStructureError.from_yaml_node(
                f'{self.tag} on a non-{self.node_type} node',
                node,
            )

        replacement = self.resolver(node, context)
        if not isinstance(replacement, Node):
            raise DirectiveStructureError.from_yaml_node(
                f'{self.tag} resolver returned {type(replacement).__name__!r} instead of a node',
                node,
            )

        return replacement
