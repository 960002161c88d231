"""Resolution context shared by one load.

The context carries everything a directive needs while a document is
being resolved: the directive table, the caller variables, the process
environment, the YAML loader class used to compose fragments, and the
guards bounding fragment nesting. A new context is created for every
load, so independent loads never share mutable state.
"""

from contextlib import contextmanager
from os import environ
from pathlib import Path
from typing import IO, TYPE_CHECKING

from yaml import SafeLoader, YAMLError
from yaml.nodes import Node, ScalarNode

from yaml_directives.core.resolver import resolve_tags
from yaml_directives.errors import DirectiveParseError, DirectiveRecursionError
from yaml_directives.models import SchemaModel

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

if TYPE_CHECKING:
    from yaml import BaseLoader

if TYPE_CHECKING:
    from yaml_directives.extensions import Directive

#: Tag of the node substituted for an empty fragment document.
NULL_TAG = 'tag:yaml.org,2002:null'

#: Default limit of nested fragments.
DEFAULT_MAX_DEPTH = 64

#: Raw YAML source accepted by PyYAML readers.
type Source = str | bytes | IO[str] | IO[bytes]


class Fragment(SchemaModel):
    """A fully resolved subtree produced by a directive."""

    node: Node
    source: str | None = None


class ResolutionContext:
    """State visible to every directive during one resolution pass.

    Attributes:
        directives: Directive table keyed by tag.
        variables: Caller variable table consulted by `!var`.
        environ: Environment consulted by `!env`.
        loader: YAML loader class used to compose fragments.
        max_depth: Maximum number of nested fragments.
        depth: Number of fragments currently being composed.
        trail: Absolute paths of the files currently being included.
    """

    def __init__(self, directives: 'Mapping[str, Directive]',
                 variables: 'Mapping[str, str] | None' = None, *,
                 environ_: 'Mapping[str, str] | None' = None,
                 loader: type['BaseLoader'] = SafeLoader,
                 max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize a resolution context.

        Args:
            directives: Directive table keyed by tag.
            variables: Caller variable table. Copied on initialization.
            environ_: Environment mapping, the process environment by default.
            loader: YAML loader class used to compose fragments.
            max_depth: Maximum number of nested fragments.
        """
        self.directives = directives
        self.variables = dict(variables or {})
        self.environ = environ if environ_ is None else environ_
        self.loader = loader
        self.max_depth = max_depth

        self.depth = 0
        self.trail: list[Path] = []

    def lookup(self, tag: str | None) -> 'Directive | None':
        """Find the directive registered for a tag."""
        if not tag:
            return None

        return self.directives.get(tag)

    def resolve(self, node: Node) -> Node:
        """Resolve all directive tags in a tree."""
        return resolve_tags(node, self)

    def compose(self, source: Source, name: str | None = None) -> Node | None:
        """Compose a single YAML document into a node tree.

        Directive tags are left untouched.

        Args:
            source: Raw YAML document.
            name: Source name reported in error locations.

        Returns:
            The root node, or `None` for an empty document.

        Raises:
            DirectiveParseError: If the source is not a well-formed
                single YAML document.
        """
        try:
            loader = self.loader(source)

        except YAMLError as base:
            raise DirectiveParseError.from_yaml_error(base, filename=name) from base

        if name:
            loader.name = name

        try:
            return loader.get_single_node()

        except YAMLError as base:
            raise DirectiveParseError.from_yaml_error(base, filename=name) from base

        finally:
            loader.dispose()

    def compose_fragment(self, source: Source, name: str | None = None) -> Fragment:
        """Compose and resolve a fragment produced by a directive.

        The fragment is parsed as a standalone document and passed through
        the resolution engine, so directives found inside it are resolved
        too. An empty document yields a null scalar.

        Args:
            source: Raw YAML fragment.
            name: Source name reported in error locations.

        Returns:
            The resolved fragment.

        Raises:
            DirectiveParseError: If the fragment is not well-formed.
            DirectiveRecursionError: If fragments nest deeper than allowed.
        """
        with self.nested(name):
            node = self.compose(source, name)
            if node is None:
                node = ScalarNode(NULL_TAG, '')

            return Fragment(node=self.resolve(node), source=name)

    @contextmanager
    def nested(self, name: str | None = None) -> 'Iterator[None]':
        """Track one level of fragment nesting.

        Raises:
            DirectiveRecursionError: If `max_depth` would be exceeded.
        """
        if self.depth >= self.max_depth:
            raise DirectiveRecursionError(
                f'Maximum fragment depth of {self.max_depth} exceeded '
                f'while composing {name or 'a fragment'}',
            )

        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    @contextmanager
    def including(self, path: Path) -> 'Iterator[Path]':
        """Track a file on the include trail.

        Args:
            path: File about to be included.

        Yields:
            The absolute path of the file.

        Raises:
            DirectiveRecursionError: If the file is already being included.
        """
        absolute = path.resolve()
        if absolute in self.trail:
            cycle = ' -> '.join(str(item) for item in (*self.trail, absolute))
            raise DirectiveRecursionError(f'Include cycle detected: {cycle}')

        self.trail.append(absolute)
        try:
            yield absolute
        finally:
            self.trail.pop()
