"""Declarative directive plugin definition.

A plugin groups directives contributed by an installed package. Plugins
are exposed through the `yaml_directives` entry point group and consumed
by the document loader on initialization.

The plugin model itself is purely declarative. It contains no resolution
logic.
"""

from pydantic import Field

from yaml_directives.models import SchemaModel

from .directives import Directive, DirectiveResolver, NodeType

__all__ = (
    'Directive',
    'DirectiveResolver',
    'NodeType',
    'Plugin',
)


class Plugin(SchemaModel):
    """Declarative container for directive extensions."""

    name: str = Field(
        pattern=r'^[a-zA-Z][\w]*$',
        title='Plugin namespace',
        description=(
            'Logical name of the plugin. '
            'Used for identification and diagnostics.'
        ),
    )

    version: int = Field(
        default=1,
        title='Directive contract version',
        description=(
            'Version of the directive contract implemented by the plugin. '
            'This is not a semantic version of the plugin implementation.'
        ),
    )

    directives: list[Directive] = Field(
        default_factory=list,
        title='Directives',
        description='Directive definitions provided by the plugin.',
    )
