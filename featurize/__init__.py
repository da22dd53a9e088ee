"""
featurize — Numeric Matrices from Tagged Records
=================================================

Mark dataclass fields as features or labels, then pull row-major matrices
out of any collection of records:

    from dataclasses import dataclass
    from featurize import feature, label, build_input_matrix, build_output_matrix

    @dataclass
    class Listing:
        rooms: int = feature()
        sizes: Tuple[float, float] = feature()      # fixed array → 2 columns
        kind: Kind = feature()                      # enum → one-hot
        price: float = label()

    X = build_input_matrix(listings)   # [array([3., 40., 12., 0., 1., 0.]), ...]
    y = build_output_matrix(listings)

Failure policy:
    unconvertible scalars   → NaN in place
    bad array / enum values → the field contributes nothing to that row
    extract() reports both; extraction itself never raises.
"""

__version__ = '0.1.0'

from featurize.roles import Role, feature, label, marked
from featurize.shapes import Scalar, FixedArray, EnumShape
from featurize.registry import FieldDescriptor, Schema, Registry, get_registry, record, classify
from featurize.coerce import coerce
from featurize.flatten import flatten, column_names
from featurize.vectorize import vectorize
from featurize.matrix import (
    Extraction,
    ExtractionReport,
    extract,
    build_matrix,
    build_input_matrix,
    build_output_matrix,
)
from featurize.errors import (
    FeaturizeError,
    CoercionError,
    SchemaError,
    HeterogeneousRecordsError,
    RaggedMatrixError,
)

__all__ = [
    'Role', 'feature', 'label', 'marked',
    'Scalar', 'FixedArray', 'EnumShape',
    'FieldDescriptor', 'Schema', 'Registry', 'get_registry', 'record', 'classify',
    'coerce', 'flatten', 'column_names', 'vectorize',
    'Extraction', 'ExtractionReport', 'extract',
    'build_matrix', 'build_input_matrix', 'build_output_matrix',
    'FeaturizeError', 'CoercionError', 'SchemaError',
    'HeterogeneousRecordsError', 'RaggedMatrixError',
]
