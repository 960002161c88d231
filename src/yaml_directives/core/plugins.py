"""Plugin discovery and directive loading infrastructure.

This module defines a mixin responsible for discovering plugins exposed
via Python entry points and registering the directives they declare.

Plugins are loaded defensively: individual failures do not interrupt
the loading process unless strict mode is enabled.
"""

from typing import TYPE_CHECKING
from warnings import warn

from pydantic import ValidationError

from yaml_directives.errors import PluginError, PluginWarning
from yaml_directives.extensions import Plugin

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint

if TYPE_CHECKING:
    from yaml_directives.extensions import Directive
    from yaml_directives.registry import ResolverRegistry

#: Entry point group scanned for plugins.
PLUGINS_GROUP = 'yaml_directives'


class PluginLoaderMixin:
    """Mixin defining plugin loading behavior.

    Attributes:
        strict_mode: If True, any plugin loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
        registry: Registry receiving plugin directives.
    """

    strict_mode: bool = False

    registry: 'ResolverRegistry'

    def add_plugin_directive(self, directive: 'Directive',
                             entrypoint: 'EntryPoint | None' = None) -> None:
        """Register a directive provided by a plugin.

        Unlike direct registration, a plugin replacing an existing tag
        is reported as a plugin issue.

        Args:
            directive: Declarative directive definition.
            entrypoint: Entry point from which the directive was loaded,
                if applicable. Used for diagnostics and warnings.

        Raises:
            PluginError: If the directive shadows an existing one on strict mode.
        """
        module = entrypoint.value if entrypoint else getattr(directive.resolver, '__module__', None)

        if directive.tag in self.registry and (error := self.emit_plugin_issue(
            f'Directive {directive.tag!r} from {module!r} is shadowing an existing',
            entrypoint,
        )):
            raise error

        self.registry.add_directive(directive)

    def emit_plugin_issue(self, message: str,
                          entrypoint: 'EntryPoint | None' = None) -> Exception | None:
        """Emit a plugin warning or return the exception.

        Args:
            message: Warning message to emit.
            entrypoint: Entry point associated with the issue, if applicable.

        Returns:
            PluginError on strict mode, otherwise `None`
                with producing a PluginWarning.
        """
        if self.strict_mode:
            return PluginError(message, entrypoint=entrypoint)

        warn(message, category=PluginWarning, stacklevel=2)

        return None

    def _load_plugin(self, entrypoint: 'EntryPoint') -> None:
        """Load and register a single plugin entry point.

        Args:
            entrypoint: Entry point describing the plugin to load.

        Raises:
            PluginError: If any loading issues occur on strict mode.
        """
        try:
            plugin = entrypoint.load()

        except ValidationError as base:
            if error := self.emit_plugin_issue(
                f'Failed to validate entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        except Exception as base:
            if error := self.emit_plugin_issue(
                f'Failed to load entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        if not isinstance(plugin, Plugin):
            if error := self.emit_plugin_issue(
                f'Loaded from entrypoint {entrypoint.name!r} object is not a plugin',
                entrypoint,
            ):
                raise error
            return None

        for directive in plugin.directives:
            self.add_plugin_directive(directive, entrypoint)

    def load_plugins(self) -> None:
        """Load plugins via entry points and register their directives.

        Raises:
            PluginError: If any loading issues occur on strict mode.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=PLUGINS_GROUP):
            self._load_plugin(entrypoint)
