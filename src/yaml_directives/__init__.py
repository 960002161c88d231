"""YAML loading with directive tags.

The `yaml_directives` package extends PyYAML loading with directive
tags resolved before a document is decoded:

- `!include <path>` replaces a node with the contents of a YAML file;
- `!env <name>` replaces a node with the value of an environment variable;
- `!var <name>` replaces a node with a value passed by the caller as
  a `key=value` argument.

Every replacement is parsed as YAML and resolved again, so directives
nest. New directives can be registered by the host program or provided
by installed plugins.
"""

from .api import default_loader, load, load_all, loads, lookup, register
from .core import DocumentLoader
from .errors import (
    DirectiveDecodeError,
    DirectiveError,
    DirectiveParseError,
    DirectiveRecursionError,
    DirectiveResourceError,
    DirectiveStructureError,
    DirectiveValueError,
    PluginError,
    PluginWarning,
)

__all__ = (
    'DirectiveDecodeError',
    'DirectiveError',
    'DirectiveParseError',
    'DirectiveRecursionError',
    'DirectiveResourceError',
    'DirectiveStructureError',
    'DirectiveValueError',
    'DocumentLoader',
    'PluginError',
    'PluginWarning',
    'default_loader',
    'load',
    'load_all',
    'loads',
    'lookup',
    'register',
)
