"""Module-level loading functions.

These functions delegate to a process-wide `DocumentLoader` created on
first use with settings taken from the environment. Directives added with
`register` are visible to every later call.
"""

from functools import cache
from typing import IO, TYPE_CHECKING, Any

from yaml_directives.core import DocumentLoader

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

if TYPE_CHECKING:
    from yaml_directives.context import Source
    from yaml_directives.extensions import Directive, DirectiveResolver, NodeType


@cache
def default_loader() -> DocumentLoader:
    """Return the process-wide document loader."""
    return DocumentLoader()


def register(tag: str, resolver: 'DirectiveResolver', *,
             node_type: 'NodeType' = 'scalar') -> 'Directive':
    """Register a directive on the process-wide loader.

    Must be called before the loads that use it. Registering a tag again
    replaces the previous directive.
    """
    return default_loader().register(tag, resolver, node_type=node_type)


def lookup(tag: str) -> 'Directive | None':
    """Find a directive registered on the process-wide loader."""
    return default_loader().lookup(tag)


def load(stream: IO[str] | IO[bytes], destination: Any = None,
         variables: 'Iterable[str]' = ()) -> Any:
    """Load a single document from a stream with the process-wide loader."""
    return default_loader().load(stream, destination, variables)


def loads(content: str | bytes, destination: Any = None,
          variables: 'Iterable[str]' = ()) -> Any:
    """Load a single document from a string with the process-wide loader."""
    return default_loader().loads(content, destination, variables)


def load_all(stream: 'Source', destination: Any = None,
             variables: 'Iterable[str]' = ()) -> 'Iterator[Any]':
    """Load every document of a stream with the process-wide loader."""
    return default_loader().load_all(stream, destination, variables)
