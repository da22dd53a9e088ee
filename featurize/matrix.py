"""
Matrix Builder
==============
Vectorize a collection of records into row-major matrices.

    build_input_matrix(records)   → rows of Role.FEATURE vectors
    build_output_matrix(records)  → rows of Role.LABEL vectors
    extract(records, role)        → Extraction(rows, columns, report)

The field set comes from the FIRST record's type (or from an explicit
schema) and is applied to every record. Row i always derives from record i.
Extraction never raises unless strict type checking is requested.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
import polars as pl

from featurize import config
from featurize.errors import HeterogeneousRecordsError, RaggedMatrixError
from featurize.flatten import column_names
from featurize.registry import Schema, get_registry
from featurize.roles import Role, as_role
from featurize.vectorize import vectorize_fields

logger = logging.getLogger(__name__)


@dataclass
class ExtractionReport:
    """Diagnostics for one matrix build. Never changes the returned rows."""
    role: Optional[Role]
    record_type: Optional[str]
    n_rows: int = 0
    n_fields: int = 0
    degraded: Dict[str, int] = field(default_factory=dict)
    # Rows whose type differs from the first record's type.
    foreign_rows: int = 0

    @property
    def n_degraded(self) -> int:
        """Total number of (row, field) flatten failures."""
        return sum(self.degraded.values())

    @property
    def ok(self) -> bool:
        return self.n_degraded == 0 and self.foreign_rows == 0


@dataclass
class Extraction:
    """Rows plus the column layout and diagnostics they were built with."""
    rows: List[np.ndarray]
    columns: List[str]
    report: ExtractionReport

    def __len__(self) -> int:
        return len(self.rows)

    def to_array(self) -> np.ndarray:
        """Stack rows into a 2-D float64 array."""
        if not self.rows:
            return np.empty((0, len(self.columns)), dtype=np.float64)
        widths = sorted({len(r) for r in self.rows})
        if len(widths) > 1:
            raise RaggedMatrixError(
                f"Rows have widths {widths}; {self.report.n_degraded} field values "
                f"failed to flatten ({self.report.degraded})"
            )
        return np.vstack(self.rows)

    def to_frame(self) -> pl.DataFrame:
        """Rows as a polars DataFrame, one Float64 column per vector slot."""
        arr = self.to_array()
        if arr.shape[1] != len(self.columns):
            raise RaggedMatrixError(
                f"Row width {arr.shape[1]} does not match {len(self.columns)} columns"
            )
        return pl.DataFrame(
            {name: arr[:, i] for i, name in enumerate(self.columns)},
            schema={name: pl.Float64 for name in self.columns},
        )


def extract(
    records: Iterable,
    role,
    schema: Optional[Schema] = None,
    strict: Optional[bool] = None,
) -> Extraction:
    """
    Build the matrix for `role` together with its columns and diagnostics.

    Args:
        records: Finite ordered collection of records.
        role: Role.FEATURE / Role.LABEL (or their string values).
        schema: Explicit field layout. Defaults to the registry's description
            of the first record's type.
        strict: Raise HeterogeneousRecordsError when records are not all of
            the first record's type. Defaults to config extraction.strict_types.

    Returns:
        Extraction. Empty when there are no records or the first record has
        no field carrying `role`.
    """
    records = list(records)
    role = as_role(role)
    if strict is None:
        strict = config.get('extraction.strict_types', False)

    if not records:
        return Extraction([], [], ExtractionReport(role, None))

    first = records[0]
    first_type = type(first)
    report = ExtractionReport(role, first_type.__name__)

    if schema is None:
        fields = get_registry().classify(first_type, role)
    else:
        fields = schema.select(role)
    if not fields:
        return Extraction([], [], report)

    report.n_fields = len(fields)
    report.foreign_rows = sum(1 for r in records if type(r) is not first_type)
    if report.foreign_rows:
        if strict:
            raise HeterogeneousRecordsError(
                f"{report.foreign_rows} of {len(records)} records are not "
                f"{first_type.__name__}"
            )
        logger.warning(f"{report.foreign_rows} of {len(records)} records are not "
                       f"{first_type.__name__}; vectorizing them with its fields")

    columns = [name for f in fields for name in column_names(f, f.read(first))]

    degraded: Counter = Counter()
    rows = [vectorize_fields(r, fields, degraded) for r in records]

    report.n_rows = len(rows)
    report.degraded = dict(degraded)
    if degraded and config.get('extraction.warn_on_degraded', True):
        logger.warning(f"{report.n_degraded} field values failed to flatten "
                       f"while extracting {role} from {first_type.__name__}: {report.degraded}")

    return Extraction(rows, columns, report)


def build_matrix(records: Iterable, role, schema: Optional[Schema] = None,
                 strict: Optional[bool] = None) -> List[np.ndarray]:
    """Rows for `role`, one 1-D float64 array per record, in input order."""
    return extract(records, role, schema=schema, strict=strict).rows


def build_input_matrix(records: Iterable, schema: Optional[Schema] = None,
                       strict: Optional[bool] = None) -> List[np.ndarray]:
    """Feature rows of `records`."""
    return build_matrix(records, Role.FEATURE, schema=schema, strict=strict)


def build_output_matrix(records: Iterable, schema: Optional[Schema] = None,
                        strict: Optional[bool] = None) -> List[np.ndarray]:
    """Label rows of `records`."""
    return build_matrix(records, Role.LABEL, schema=schema, strict=strict)
