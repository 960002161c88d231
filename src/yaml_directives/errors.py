"""Core exception hierarchy.

This module defines the error and warning types raised while resolving
directive tags and decoding documents. Every error can carry a source
location and a snippet of the failing fragment, rendered the same way
PyYAML renders its own marked errors.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import YAMLError, dump
from yaml.error import MarkedYAMLError
from yaml.reader import ReaderError

from yaml_directives.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError
    from pydantic_core import ErrorDetails
    from yaml.error import Mark
    from yaml.nodes import Node

LOCATION_INDENT = ' ' * 4
SNIPPET_INDENT = 8

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source (file path or stream name) of the failing node.
    filename: str | None

    #: Zero-based line and column in the source.
    line_num: int | None
    column_num: int | None

    #: Position in the source used to render a snippet.
    mark: 'Mark | None'

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Decoded data associated with the error.
    element: Any


def _sanitize(value: Any) -> Any:  # noqa: ANN401
    """Replace values the safe dumper cannot represent with a placeholder."""
    if value is None or isinstance(value, SCALARS):
        return value

    if isinstance(value, MAPPINGS):
        return {key: _sanitize(item) for key, item in value.items()}

    if isinstance(value, SEQUENCES):
        return [_sanitize(item) for item in value]

    return FORMAT_REPLACER


class ErrorFormatter:
    """Render an error message with its source location and a snippet."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            The message followed by a location line and, when available,
            a snippet of the failing YAML.
        """
        if not context:
            return message

        lines = [message, cls.get_location_string(context)]
        if snippet := cls.get_snippet_string(context):
            lines.append(snippet)

        return linesep.join(lines)

    @staticmethod
    def get_location_string(context: ErrorContext) -> str:
        """Format the source location as `in "<name>", line L, column C`."""
        location = f'{LOCATION_INDENT}in "{context.get('filename') or FORMAT_FILENAME}"'

        if (line_num := context.get('line_num')) is not None:
            location += f', line {line_num + 1}'
            if (column_num := context.get('column_num')) is not None:
                location += f', column {column_num + 1}'

        return location

    @staticmethod
    def get_snippet_string(context: ErrorContext) -> str:
        """Render the failing source line, or the failing decoded element.

        Returns:
            An indented snippet, or an empty string when the context
            holds neither a usable mark nor decoded data.
        """
        mark = context.get('mark')
        if isinstance(error := context.get('error'), MarkedYAMLError):
            mark = error.problem_mark or mark

        if mark is not None and (snippet := mark.get_snippet(indent=SNIPPET_INDENT)):
            return snippet

        if element := context.get('element'):
            data = dump(_sanitize(element), indent=2, sort_keys=False)
            return linesep.join(
                f'{' ' * SNIPPET_INDENT}{line}'
                for line in ('...', *data.splitlines())
                if line.strip()
            )

        return ''


class PluginWarning(UserWarning):
    """Warning emitted for non-fatal plugin-related issues.

    Used when a plugin cannot be loaded or processed, but the issue
    does not prevent further loading (non-strict mode).
    """


class DirectiveError(Exception, ErrorFormatter):
    """Base exception for all yaml-directives errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context with optional location and data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)

    @classmethod
    def from_yaml_node(cls, message: str, node: 'Node',
                       error: Exception | None = None) -> 'Self':
        """Create an error instance from a YAML node.

        Extracts positional information from the node start mark and
        attaches it to the resulting error context.

        Args:
            message: Human-readable error message.
            node: YAML node associated with the error.
            error: Optional underlying exception.

        Returns:
            An initialized error instance with location context.
        """
        mark = node.start_mark
        if mark is None:
            return cls(message)

        error_context = ErrorContext(
            filename=mark.name,
            line_num=mark.line,
            column_num=mark.column,
            mark=mark,
            error=error,
        )

        return cls(message, context=error_context)


class PluginError(DirectiveError):
    """Error raised for fatal plugin-related failures.

    Raised when a plugin entry point is invalid, misconfigured, or
    fails to load in strict mode.
    """

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a plugin error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional plugin entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)


class DirectiveStructureError(DirectiveError):
    """Error raised when a directive tag is attached to a node of the wrong kind."""


class DirectiveResourceError(DirectiveError):
    """Error raised when an external resource (usually a file) cannot be read.

    The message carries the underlying I/O failure description verbatim;
    the original exception is chained as `__cause__`.
    """


class DirectiveValueError(DirectiveError):
    """Error raised when a referenced environment or caller variable is missing."""


class DirectiveRecursionError(DirectiveError):
    """Error raised when fragments nest too deeply or an include cycle is found."""


class DirectiveParseError(DirectiveError):
    """Error raised when a document or a fragment is not well-formed YAML."""

    @classmethod
    def from_yaml_error(cls, error: YAMLError, *,
                        filename: str | None = None) -> 'Self':
        """Create a parse error from a PyYAML failure.

        Marked errors point at the failing position. Reader errors
        (undecodable bytes or non-printable characters) only carry
        the source name and the offending character.

        Args:
            error: Exception raised by the YAML reader, scanner, parser,
                composer, or constructor.
            filename: Source name, used when the error does not carry one.

        Returns:
            DirectiveParseError representing the YAML failure.
        """
        message = 'Invalid YAML'

        if isinstance(error, ReaderError):
            problem = str(error).splitlines()[0]
            message += f'{linesep}{LOCATION_INDENT}{problem}'
            return cls(message, context=ErrorContext(filename=filename or error.name, error=error))

        if not isinstance(error, MarkedYAMLError):
            message += f'{linesep}{LOCATION_INDENT}{error}'
            return cls(message, context=ErrorContext(filename=filename, error=error))

        if error.problem:
            message += f'{linesep}{LOCATION_INDENT}{error.problem}'

        mark = error.problem_mark or error.context_mark
        if mark is None:
            return cls(message)

        error_context = ErrorContext(
            filename=mark.name,
            line_num=mark.line,
            column_num=mark.column,
            mark=mark,
            error=error,
        )

        return cls(message, context=error_context)


class DirectiveDecodeError(DirectiveError):
    """Error raised when a resolved document does not fit the destination shape."""

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None) -> 'Self':
        """Create a decode error from a Pydantic validation failure.

        The message names the first failing location. When it can be
        found in the decoded data, the failing element is attached to
        the error as a YAML snippet.

        Args:
            error: ValidationError raised while binding the document.
            data: Decoded document data.
            filename: Name of the source stream.

        Returns:
            DirectiveDecodeError representing the validation failure.
        """
        error_context = ErrorContext(
            filename=filename,
            error=error,
            element=data,
        )

        details = error.errors(include_url=False, include_input=False)
        if not details:  # pragma: no cover
            return cls('Decode error', context=error_context)

        if isinstance(data, (dict, list, tuple)):
            for item in details:
                if context := cls._locate_pydantic_context(data, item):
                    message, value = context
                    return cls(message, context=ErrorContext({**error_context, 'element': value}))

        first = details[0]
        location = '.'.join(str(key) for key in first['loc'])
        message = f'Decode error: {first['msg']}'
        if location:
            message = f'Decode error at {location!r}: {first['msg']}'

        return cls(message, context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in decoded data.

        Walks the Pydantic error location path and extracts the minimal
        substructure responsible for the failure.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if a relevant
            context can be located, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None
        path: list[str] = []

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)):
                if isinstance(key, int) and 0 <= key < len(last_item):
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
                    path.append(str(key))
            elif isinstance(last_item, dict):
                if key in last_item:
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
                    path.append(str(key))
            else:
                return None

        if last_key is None:
            return None

        message = None
        for item in (error.get('msg') or '').splitlines():
            if item_message := item.strip():
                message = f'Decode error at {'.'.join(path)!r}: {item_message}'
                break

        if message:
            if isinstance(container, (list, tuple)):
                return message, [last_item]
            if isinstance(container, dict):
                return message, {last_key: last_item}

        return None
