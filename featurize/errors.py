"""
Exceptions raised by featurize.

Extraction itself never raises: unrepresentable scalars become NaN and
structurally wrong array/enum values are dropped. These exist for the
opt-in strict paths and for malformed schemas.
"""


class FeaturizeError(Exception):
    """Base class for all featurize errors."""


class CoercionError(FeaturizeError, ValueError):
    """A value could not be converted to a float (strict element coercion)."""


class SchemaError(FeaturizeError, ValueError):
    """A schema declaration is malformed."""


class HeterogeneousRecordsError(FeaturizeError, TypeError):
    """Strict extraction was given records of more than one type."""


class RaggedMatrixError(FeaturizeError, ValueError):
    """Rows have different widths and cannot be stacked into a 2-D array."""
