"""Test suite for the yaml-directives package.

This package contains unit and integration tests validating directive
resolution, fragment composition, typed decoding, plugin discovery and
the command-line interface.
"""
