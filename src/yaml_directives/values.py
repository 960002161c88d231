"""Core type definitions for decoded documents.

This module defines the value types produced by decoding a fully
resolved YAML tree with a safe constructor, and the container groups
used when such values are inspected or re-serialized.
"""

from collections.abc import Mapping, Sequence
from datetime import date, datetime

#: Scalars are atomic values produced by the YAML safe schema.
type Scalar = date | datetime | str | bytes | int | float | bool

#: A decoded value is any nesting of scalars, sequences and mappings.
type Value = Scalar | Sequence['Value'] | Mapping[str, 'Value'] | None

MAPPINGS = (dict,)
SCALARS = (date, datetime, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)
