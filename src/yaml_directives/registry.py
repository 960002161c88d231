"""Directive registry.

The registry maps tags to directives. Registration is last-writer-wins:
registering a tag again silently replaces the previous directive. Every
load works on a snapshot of the registry, so directives registered
afterwards only affect later loads.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import ValidationError

from yaml_directives.errors import PluginError
from yaml_directives.extensions import Directive

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import Self

if TYPE_CHECKING:
    from yaml_directives.extensions import DirectiveResolver, NodeType


class ResolverRegistry(Mapping[str, Directive]):
    """Mapping of directive tags to directives."""

    def __init__(self, directives: 'Iterable[Directive]' = ()) -> None:
        """Initialize the registry.

        Args:
            directives: Directives registered in order; later tags win.
        """
        self._directives: dict[str, Directive] = {}

        for directive in directives:
            self.add_directive(directive)

    def __getitem__(self, tag: str) -> Directive:
        return self._directives[tag]

    def __iter__(self) -> 'Iterator[str]':
        return iter(self._directives)

    def __len__(self) -> int:
        return len(self._directives)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({sorted(self._directives)!r})'

    @property
    def tags(self) -> tuple[str, ...]:
        """Registered tags in registration order."""
        return tuple(self._directives)

    def add_directive(self, directive: Directive) -> None:
        """Register a declarative directive, replacing any previous one."""
        self._directives[directive.tag] = directive

    def register(self, tag: str, resolver: 'DirectiveResolver', *,
                 node_type: 'NodeType' = 'scalar') -> Directive:
        """Register a resolver for a tag.

        Args:
            tag: YAML tag to match, for example `!include`.
            resolver: Callable producing the replacement node.
            node_type: Kind of node the tag may be attached to.

        Returns:
            The registered directive.

        Raises:
            PluginError: If the tag or the resolver is invalid.
        """
        try:
            directive = Directive(tag=tag, resolver=resolver, node_type=node_type)

        except ValidationError as base:
            raise PluginError(f'Invalid directive {tag!r}') from base

        self.add_directive(directive)

        return directive

    def lookup(self, tag: str) -> Directive | None:
        """Find the directive registered for a tag."""
        return self._directives.get(tag)

    def unregister(self, tag: str) -> None:
        """Remove a directive if it is registered."""
        self._directives.pop(tag, None)

    def clear(self) -> None:
        """Remove all directives."""
        self._directives.clear()

    def copy(self) -> 'Self':
        """Snapshot the registry."""
        return type(self)(self._directives.values())
