"""Directive resolution engine and document loader.

This package wires the directive registry, plugin discovery and the tag
resolution engine into a PyYAML-based loader.

The primary public entry point is `DocumentLoader`, which resolves
directive tags in a composed document before the document is decoded.
"""

from .document import DocumentLoader
from .resolver import resolve_tags

__all__ = (
    'DocumentLoader',
    'resolve_tags',
)
