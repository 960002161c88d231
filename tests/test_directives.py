"""Tests for the built-in `!include`, `!env` and `!var` directives."""

from typing import TYPE_CHECKING

import pytest

from yaml_directives.core import DocumentLoader
from yaml_directives.errors import (
    DirectiveParseError,
    DirectiveRecursionError,
    DirectiveResourceError,
    DirectiveStructureError,
    DirectiveValueError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem
    from pytest_mock import MockType
    from yaml import SafeLoader


@pytest.mark.parametrize('value, expected', (
    pytest.param('bar', 'bar', id='string'),
    pytest.param('42', 42, id='integer'),
    pytest.param('[1, 2]', [1, 2], id='sequence'),
    pytest.param('{a: b}', {'a': 'b'}, id='mapping'),
    pytest.param('  spaced  ', 'spaced', id='plain scalar whitespace'),
))
def test_env_directive(value: str, expected: object, monkeypatch: pytest.MonkeyPatch,
                       document_loader: DocumentLoader) -> None:
    """Replace a node with the parsed value of an environment variable."""
    monkeypatch.setenv('FOO', value)

    assert document_loader.loads('x: !env FOO\n') == {'x': expected}


def test_env_directive_nested(monkeypatch: pytest.MonkeyPatch,
                              document_loader: DocumentLoader) -> None:
    """Resolve directives found inside an environment value."""
    monkeypatch.setenv('OUTER', '{inner: !env INNER, name: !var name}')
    monkeypatch.setenv('INNER', 'deep')

    data = document_loader.loads('x: !env OUTER\n', variables=['name=hello'])

    assert data == {'x': {'inner': 'deep', 'name': 'hello'}}


def test_env_directive_unset(monkeypatch: pytest.MonkeyPatch,
                             document_loader: DocumentLoader) -> None:
    """Fail on an unset environment variable."""
    monkeypatch.delenv('MISSING_VARIABLE', raising=False)

    with pytest.raises(DirectiveValueError, match=r'^environment variable MISSING_VARIABLE not set'):
        document_loader.loads('x: !env MISSING_VARIABLE\n')


def test_env_directive_empty(monkeypatch: pytest.MonkeyPatch,
                             document_loader: DocumentLoader) -> None:
    """Treat an empty environment variable as unset."""
    monkeypatch.setenv('EMPTY_VARIABLE', '')

    with pytest.raises(DirectiveValueError, match=r'^environment variable EMPTY_VARIABLE not set'):
        document_loader.loads('x: !env EMPTY_VARIABLE\n')


def test_env_directive_invalid_value(monkeypatch: pytest.MonkeyPatch,
                                     document_loader: DocumentLoader) -> None:
    """Fail on an environment value that is not valid YAML."""
    monkeypatch.setenv('BROKEN', '[unclosed')

    with pytest.raises(DirectiveParseError, match=r'^Invalid YAML') as error:
        document_loader.loads('x: !env BROKEN\n')

    assert '<env BROKEN>' in str(error.value)


@pytest.mark.parametrize('variables, expected', (
    pytest.param(['name=hello'], 'hello', id='string'),
    pytest.param(['name=1.5'], 1.5, id='float'),
    pytest.param(['name={a: [1, 2]}'], {'a': [1, 2]}, id='mapping'),
    pytest.param(['name='], None, id='empty'),
    pytest.param(['other=1', 'name=a=b'], 'a=b', id='value with separator'),
))
def test_var_directive(variables: list[str], expected: object,
                       document_loader: DocumentLoader) -> None:
    """Replace a node with the parsed value of a caller variable."""
    assert document_loader.loads('v: !var name\n', variables=variables) == {'v': expected}


def test_var_directive_missing(document_loader: DocumentLoader) -> None:
    """Fail on a variable absent from the variable table."""
    with pytest.raises(DirectiveValueError, match=r'^variable name not set'):
        document_loader.loads('v: !var name\n', variables=['name', 'other=1'])


def test_include_directive(fs: 'FakeFilesystem', monkeypatch: pytest.MonkeyPatch,
                           document_loader: DocumentLoader) -> None:
    """Replace a node with included content, resolving nested directives."""
    fs.create_file('a.yaml', contents='x: !env FOO\n')
    monkeypatch.setenv('FOO', 'bar')

    assert document_loader.loads('incData: !include a.yaml\n') == {'incData': {'x': 'bar'}}


def test_include_directive_transitive(fs: 'FakeFilesystem',
                                      document_loader: DocumentLoader) -> None:
    """Resolve includes of included files, absolute and relative."""
    fs.create_file('/configs/c.yaml', contents='- !var item\n- last\n')
    fs.create_file('b.yaml', contents='items: !include /configs/c.yaml\n')

    data = document_loader.loads('root: !include b.yaml\n', variables=['item=first'])

    assert data == {'root': {'items': ['first', 'last']}}


def test_include_same_file_twice(fs: 'FakeFilesystem',
                                 document_loader: DocumentLoader) -> None:
    """Include a file several times outside of a cycle."""
    fs.create_file('shared.yaml', contents='value: 1\n')

    data = document_loader.loads('- !include shared.yaml\n- !include shared.yaml\n')

    assert data == [{'value': 1}, {'value': 1}]


def test_include_empty_file(fs: 'FakeFilesystem',
                            document_loader: DocumentLoader) -> None:
    """Resolve an empty file to null."""
    fs.create_file('empty.yaml', contents='')

    assert document_loader.loads('x: !include empty.yaml\n') == {'x': None}


def test_include_merge_key(fs: 'FakeFilesystem',
                           document_loader: DocumentLoader) -> None:
    """Merge an included mapping with the YAML merge key."""
    fs.create_file('base.yaml', contents='a: 1\nb: 2\n')

    data = document_loader.loads('<<: !include base.yaml\nb: 3\n')

    assert data == {'a': 1, 'b': 3}


def test_include_missing_file(fs: 'FakeFilesystem',  # noqa: ARG001
                              document_loader: DocumentLoader) -> None:
    """Surface the I/O failure of a missing file."""
    with pytest.raises(DirectiveResourceError, match=r'No such file or directory') as error:
        document_loader.loads('x: !include missing.yaml\n')

    assert isinstance(error.value.__cause__, FileNotFoundError)


def test_include_invalid_file(fs: 'FakeFilesystem',
                              document_loader: DocumentLoader) -> None:
    """Fail on an included file that is not valid YAML."""
    fs.create_file('broken.yaml', contents='key: [unclosed\n')

    with pytest.raises(DirectiveParseError, match=r'^Invalid YAML') as error:
        document_loader.loads('x: !include broken.yaml\n')

    assert 'broken.yaml' in str(error.value)


@pytest.mark.parametrize('files', (
    pytest.param({'a.yaml': 'x: !include a.yaml\n'}, id='self'),
    pytest.param({
        'a.yaml': 'x: !include b.yaml\n',
        'b.yaml': 'y: !include a.yaml\n',
    }, id='pair'),
))
def test_include_cycle(files: dict[str, str], fs: 'FakeFilesystem',
                       document_loader: DocumentLoader) -> None:
    """Detect include cycles."""
    for name, contents in files.items():
        fs.create_file(name, contents=contents)

    with pytest.raises(DirectiveRecursionError, match=r'^Include cycle detected: .*a\.yaml -> .*a\.yaml'):
        document_loader.loads('root: !include a.yaml\n')


@pytest.mark.parametrize('max_depth, expected', (
    pytest.param(3, {'x': 'value'}, id='within limit'),
    pytest.param(2, None, id='over limit'),
))
def test_fragment_depth_limit(max_depth: int, expected: object, monkeypatch: pytest.MonkeyPatch,
                              patch_entrypoints: 'Callable[..., MockType]',
                              loader: 'type[SafeLoader]') -> None:
    """Bound the number of nested fragments."""
    patch_entrypoints()
    monkeypatch.setenv('FIRST', '!env SECOND')
    monkeypatch.setenv('SECOND', '!env THIRD')
    monkeypatch.setenv('THIRD', 'value')

    document_loader = DocumentLoader(loader, max_depth=max_depth)

    if expected is not None:
        assert document_loader.loads('x: !env FIRST\n') == expected
        return

    with pytest.raises(DirectiveRecursionError, match=r'^Maximum fragment depth of 2 exceeded'):
        document_loader.loads('x: !env FIRST\n')


@pytest.mark.parametrize('content', (
    pytest.param('x: !include {path: a.yaml}\n', id='include mapping'),
    pytest.param('x: !include [a.yaml]\n', id='include sequence'),
    pytest.param('x: !env\n  name: FOO\n', id='env mapping'),
    pytest.param('x: !env\n  - FOO\n', id='env sequence'),
    pytest.param('x: !var {name: value}\n', id='var mapping'),
    pytest.param('x: !var []\n', id='var sequence'),
))
def test_directive_on_non_scalar(content: str, document_loader: DocumentLoader) -> None:
    """Fail when a built-in directive is attached to a non-scalar node."""
    tag = content.split()[1]

    with pytest.raises(DirectiveStructureError, match=rf'^{tag} on a non-scalar node'):
        document_loader.loads(content, variables=['name=value'])


def test_env_directive_control_character(monkeypatch: pytest.MonkeyPatch,
                                         document_loader: DocumentLoader) -> None:
    """Fail on an environment value holding non-printable characters."""
    monkeypatch.setenv('CTRL', 'a\x07b')

    with pytest.raises(DirectiveParseError, match=r'^Invalid YAML') as error:
        document_loader.loads('x: !env CTRL\n')

    assert 'unacceptable character #x0007' in str(error.value)
    assert '<env CTRL>' in str(error.value)


def test_include_invalid_path(document_loader: DocumentLoader) -> None:
    """Surface an invalid include path as a resource failure."""
    with pytest.raises(DirectiveResourceError, match=r'embedded null') as error:
        document_loader.loads('x: !include "a\\0b.yaml"\n')

    assert isinstance(error.value.__cause__, ValueError)
