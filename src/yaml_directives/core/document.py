"""YAML document loader with directive resolution.

This module defines the high-level loader integrating the directive
registry, plugin-provided directives and typed decoding.

Loading a document:
- rebuilds the variable table from `key=value` arguments;
- reads the whole input stream;
- composes the root node and resolves every directive before the tree
  is constructed, so decoding only ever sees resolved nodes;
- binds the constructed data to the requested destination type.
"""

from typing import IO, TYPE_CHECKING, Any, overload

from pydantic import TypeAdapter, ValidationError
from yaml import SafeLoader, YAMLError

from yaml_directives.builtins import directives
from yaml_directives.context import ResolutionContext
from yaml_directives.errors import DirectiveDecodeError, DirectiveParseError
from yaml_directives.models import LoaderSettings
from yaml_directives.names import parse_variables
from yaml_directives.registry import ResolverRegistry

from .plugins import PluginLoaderMixin

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

if TYPE_CHECKING:
    from yaml import BaseLoader

if TYPE_CHECKING:
    from yaml_directives.context import Source
    from yaml_directives.extensions import Directive, DirectiveResolver, NodeType
    from yaml_directives.values import Value


class DocumentLoader(PluginLoaderMixin):
    """YAML loader resolving directive tags before decoding.

    The loader owns a directive registry populated with the built-in
    `!include`, `!env` and `!var` directives and with plugin directives.
    Each load resolves against a snapshot of that registry and a fresh
    variable table.

    Registering directives is not synchronized: register everything
    before loads start when the host program is multi-threaded.
    """

    def __init__(self, loader: type['BaseLoader'] = SafeLoader, *,
                 strict: bool | None = None,
                 max_depth: int | None = None,
                 plugins: bool | None = None,
                 settings: LoaderSettings | None = None) -> None:
        """Initialize the document loader.

        Arguments left as `None` fall back to `settings`, which are read
        from `YAML_DIRECTIVES_*` environment variables when not given.

        Args:
            loader: PyYAML loader class used to compose and construct
                documents. Its constructors define how resolved nodes
                are decoded.
            strict: Whether to raise errors on plugin loading failures
                instead of emitting warnings.
            max_depth: Maximum number of nested fragments per document.
            plugins: Whether to load directives from installed plugins.
            settings: Explicit loader settings.
        """
        if settings is None:
            settings = LoaderSettings()

        self.loader = loader
        self.strict_mode = settings.strict if strict is None else strict
        self.max_depth = settings.max_depth if max_depth is None else max_depth

        self.registry = ResolverRegistry((
            directives.include,
            directives.env,
            directives.variable,
        ))

        #: Variable table of the most recent load.
        self.variables: dict[str, str] = {}

        if settings.plugins if plugins is None else plugins:
            self.load_plugins()

    def register(self, tag: str, resolver: 'DirectiveResolver', *,
                 node_type: 'NodeType' = 'scalar') -> 'Directive':
        """Register a directive, replacing any directive with the same tag.

        Args:
            tag: YAML tag to match, for example `!include`.
            resolver: Callable producing the replacement node.
            node_type: Kind of node the tag may be attached to.

        Returns:
            The registered directive.

        Raises:
            PluginError: If the tag or the resolver is invalid.
        """
        return self.registry.register(tag, resolver, node_type=node_type)

    def lookup(self, tag: str) -> 'Directive | None':
        """Find the directive registered for a tag."""
        return self.registry.lookup(tag)

    def new_context(self, variables: 'Iterable[str]' = ()) -> ResolutionContext:
        """Create the resolution context of a new load.

        The variable table is rebuilt from scratch, replacing the table
        of the previous load.

        Args:
            variables: Assignments in the `key=value` form.

        Returns:
            A context bound to a snapshot of the registry.
        """
        self.variables = parse_variables(variables)

        return ResolutionContext(
            self.registry.copy(),
            self.variables,
            loader=self.loader,
            max_depth=self.max_depth,
        )

    @overload
    def load[T](self, stream: IO[str] | IO[bytes], destination: type[T],
                variables: 'Iterable[str]' = ()) -> T:
        ...  # pragma: no cover

    @overload
    def load(self, stream: IO[str] | IO[bytes], destination: None = None,
             variables: 'Iterable[str]' = ()) -> 'Value':
        ...  # pragma: no cover

    def load(self, stream: IO[str] | IO[bytes], destination: Any = None,
             variables: 'Iterable[str]' = ()) -> Any:
        """Load a single YAML document from a stream.

        Args:
            stream: Readable text or binary stream.
            destination: Type the document is bound to. When omitted,
                the constructed data is returned as is.
            variables: Assignments in the `key=value` form available
                to `!var`.

        Returns:
            The resolved and decoded document.

        Raises:
            DirectiveError: On the first resolution, parse, or decode error.
        """
        context = self.new_context(variables)
        content = stream.read()

        return self._load(content, context, destination, getattr(stream, 'name', None))

    @overload
    def loads[T](self, content: str | bytes, destination: type[T],
                 variables: 'Iterable[str]' = ()) -> T:
        ...  # pragma: no cover

    @overload
    def loads(self, content: str | bytes, destination: None = None,
              variables: 'Iterable[str]' = ()) -> 'Value':
        ...  # pragma: no cover

    def loads(self, content: str | bytes, destination: Any = None,
              variables: 'Iterable[str]' = ()) -> Any:
        """Load a single YAML document from a string.

        See `load` for arguments and errors.
        """
        context = self.new_context(variables)

        return self._load(content, context, destination)

    def load_all(self, stream: 'Source', destination: Any = None,
                 variables: 'Iterable[str]' = ()) -> 'Iterator[Any]':
        """Load every document of a multi-document stream.

        The variable table is built once, before iteration starts.
        Documents are resolved and decoded lazily, one per iteration.

        Args:
            stream: Readable stream or string holding the documents.
            destination: Type each document is bound to.
            variables: Assignments in the `key=value` form.

        Returns:
            An iterator over decoded documents.
        """
        context = self.new_context(variables)
        name = getattr(stream, 'name', None)

        content = stream
        if hasattr(stream, 'read'):
            content = stream.read()

        return self._load_all(content, context, destination, name)

    def bind(self, data: 'Value', destination: Any = None,  # noqa: ANN401
             name: str | None = None) -> Any:
        """Bind decoded data to a destination type.

        Args:
            data: Constructed document data.
            destination: Target type; `None` returns the data unchanged.
            name: Source name reported in errors.

        Returns:
            Data validated into the destination type.

        Raises:
            DirectiveDecodeError: If the data does not fit the destination.
        """
        if destination is None:
            return data

        try:
            return TypeAdapter(destination).validate_python(data)

        except ValidationError as base:
            raise DirectiveDecodeError.from_pydantic_error(base, data=data, filename=name) from base

    def _open(self, content: 'Source', name: str | None = None) -> 'BaseLoader':
        """Create a PyYAML loader over the content.

        Raises:
            DirectiveParseError: If the content cannot be decoded or holds
                non-printable characters.
        """
        try:
            loader = self.loader(content)

        except YAMLError as base:
            raise DirectiveParseError.from_yaml_error(base, filename=name) from base

        if name:
            loader.name = name

        return loader

    def _load(self, content: 'Source', context: ResolutionContext,
              destination: Any = None, name: str | None = None) -> Any:  # noqa: ANN401
        """Compose, resolve, construct and bind a single document."""
        loader = self._open(content, name)

        try:
            node = loader.get_single_node()
            data = None
            if node is not None:
                data = loader.construct_document(context.resolve(node))

        except YAMLError as base:
            raise DirectiveParseError.from_yaml_error(base, filename=name) from base

        finally:
            loader.dispose()

        return self.bind(data, destination, name)

    def _load_all(self, content: 'Source', context: ResolutionContext,
                  destination: Any = None, name: str | None = None) -> 'Iterator[Any]':
        """Compose, resolve, construct and bind documents one by one."""
        loader = self._open(content, name)

        try:
            while True:
                try:
                    if not loader.check_node():
                        break
                    data = loader.construct_document(context.resolve(loader.get_node()))

                except YAMLError as base:
                    raise DirectiveParseError.from_yaml_error(base, filename=name) from base

                yield self.bind(data, destination, name)

        finally:
            loader.dispose()
