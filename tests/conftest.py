"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING

import pytest
import yaml

from yaml_directives import default_loader
from yaml_directives.core import DocumentLoader

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from yaml_directives.extensions import Plugin


@pytest.fixture
def loader() -> type[yaml.SafeLoader]:
    """Provide an isolated YAML SafeLoader class for tests.

    Creates a dedicated subclass of `yaml.SafeLoader`, so constructors
    registered during a test do not leak into other tests.

    Returns:
        A subclass of `yaml.SafeLoader`.
    """
    class Loader(yaml.SafeLoader):
        pass

    return Loader


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of plugins in the `yaml_directives` entry point group.

    The returned factory allows configuring:
    - successfully loadable plugins,
    - or an exception raised during plugin loading,
    - or an empty entry point list.
    """
    def patch(*plugins: 'Plugin | None', raises: type[Exception] | Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled plugin configuration.

        Args:
            plugins: Objects to be returned by `EntryPoint.load()`.
                If empty, no entry points are registered.
            raises: Exception to raise when `EntryPoint.load()` is called.

        Returns:
            A mock replacing `importlib.metadata.entry_points`.
        """
        entrypoints = []
        for plugin in plugins:
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'yaml_directives'
            ep.name = 'tests'
            ep.value = 'tests.examples.plugins:example'
            ep.load.return_value = plugin
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch


@pytest.fixture
def document_loader(patch_entrypoints: 'Callable[..., MockType]',
                    loader: type[yaml.SafeLoader]) -> DocumentLoader:
    """Provide a strict document loader without plugins."""
    patch_entrypoints()

    return DocumentLoader(loader, strict=True)


@pytest.fixture
def isolated_default_loader(patch_entrypoints: 'Callable[..., MockType]') -> 'Iterator[DocumentLoader]':
    """Provide a fresh process-wide loader, discarded after the test."""
    patch_entrypoints()

    default_loader.cache_clear()
    yield default_loader()
    default_loader.cache_clear()
