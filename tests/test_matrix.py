"""Tests for record vectorization and matrix building."""

import logging
import math
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import polars as pl
import pytest

from featurize import (
    HeterogeneousRecordsError,
    RaggedMatrixError,
    Role,
    Schema,
    build_input_matrix,
    build_matrix,
    build_output_matrix,
    extract,
    feature,
    label,
    vectorize,
)
from featurize import config


class Kind(Enum):
    FLAT = 'flat'
    HOUSE = 'house'
    VILLA = 'villa'


@dataclass
class Listing:
    rooms: int = feature()
    sizes: Tuple[float, float] = feature()
    kind: Kind = feature()
    price: float = label()
    note: str = ''


@dataclass
class Point:
    weight: float = feature()
    coords: List[float] = feature()


@dataclass
class Reading:
    a: float = feature(default=0.0)
    b: str = feature(default='0')
    c: bool = feature(default=False)
    y: float = label(default=0.0)


@dataclass
class Tag:
    weight: float = 5.0


LISTINGS = [
    Listing(3, (40.0, 12.0), Kind.HOUSE, 250000.0),
    Listing(1, (25.0, 0.0), Kind.FLAT, 90000.0),
]


class TestVectorize:

    def test_scalar_and_array(self):
        """weight=3, coords=[1, 2] → [3, 1, 2]."""
        np.testing.assert_array_equal(vectorize(Point(3, [1, 2]), Role.FEATURE), [3.0, 1.0, 2.0])

    def test_mixed_shapes(self):
        out = vectorize(LISTINGS[0], Role.FEATURE)
        np.testing.assert_array_equal(out, [3.0, 40.0, 12.0, 0.0, 1.0, 0.0])
        np.testing.assert_array_equal(vectorize(LISTINGS[0], 'label'), [250000.0])

    def test_no_fields_is_empty(self):
        out = vectorize(Tag(), Role.FEATURE)
        assert out.shape == (0,)
        assert vectorize(Point(1, []), Role.LABEL).shape == (0,)

    def test_nan_scalar(self):
        out = vectorize(Point(None, [1, 2]), Role.FEATURE)
        assert math.isnan(out[0])
        np.testing.assert_array_equal(out[1:], [1.0, 2.0])

    def test_failed_array_contributes_nothing(self):
        np.testing.assert_array_equal(vectorize(Point(3, 'oops'), Role.FEATURE), [3.0])

    def test_failed_enum_contributes_nothing(self):
        rec = Listing(2, (1.0, 2.0), 'house', 1.0)
        np.testing.assert_array_equal(vectorize(rec, Role.FEATURE), [2.0, 1.0, 2.0])

    def test_explicit_schema_for_dicts(self):
        schema = Schema.from_dict({'fields': [
            {'name': 'x', 'role': 'feature'},
            {'name': 'tags', 'role': 'feature', 'shape': 'enum', 'domain': ['a', 'b']},
        ]})
        out = vectorize({'x': '1.5', 'tags': 'b'}, Role.FEATURE, schema=schema)
        np.testing.assert_array_equal(out, [1.5, 0.0, 1.0])

    @pytest.mark.skipif(sys.version_info < (3, 10), reason="X | None needs Python 3.10")
    def test_union_operator_fields_match_optional(self):
        @dataclass
        class Classic:
            kind: Optional[Kind] = feature(default=None)
            coords: Optional[List[float]] = feature(default=None)

        @dataclass
        class Modern:
            kind: Kind | None = feature(default=None)
            coords: list[float] | None = feature(default=None)

        expected = [0.0, 1.0, 0.0, 1.0, 2.0]
        np.testing.assert_array_equal(vectorize(Classic(Kind.HOUSE, [1.0, 2.0]), Role.FEATURE), expected)
        np.testing.assert_array_equal(vectorize(Modern(Kind.HOUSE, [1.0, 2.0]), Role.FEATURE), expected)

    def test_does_not_modify_record(self):
        rec = Point(3, [1, 2])
        vectorize(rec, Role.FEATURE)
        assert rec == Point(3, [1, 2])


class TestBuildMatrix:

    def test_empty_collection(self):
        assert build_input_matrix([]) == []
        assert build_output_matrix(iter([])) == []

    def test_row_per_record_in_order(self):
        rows = build_input_matrix(LISTINGS)
        assert len(rows) == 2
        np.testing.assert_array_equal(rows[0], [3.0, 40.0, 12.0, 0.0, 1.0, 0.0])
        np.testing.assert_array_equal(rows[1], [1.0, 25.0, 0.0, 1.0, 0.0, 0.0])

    def test_output_matrix(self):
        rows = build_output_matrix(LISTINGS)
        np.testing.assert_array_equal(np.vstack(rows), [[250000.0], [90000.0]])

    def test_scalar_only_rows(self):
        """Row k-th value equals the coerced k-th marked field."""
        records = [Reading(1, '2', True, 9), Reading(-1.5, 'x', False, 8)]
        rows = build_matrix(records, Role.FEATURE)
        assert all(len(r) == 3 for r in rows)
        np.testing.assert_array_equal(rows[0], [1.0, 2.0, 1.0])
        assert rows[1][0] == -1.5
        assert math.isnan(rows[1][1])
        assert rows[1][2] == 0.0

    def test_accepts_generator(self):
        rows = build_input_matrix(p for p in [Point(1, [2]), Point(3, [4])])
        np.testing.assert_array_equal(np.vstack(rows), [[1.0, 2.0], [3.0, 4.0]])

    def test_first_record_without_fields_gives_empty(self):
        assert build_input_matrix([Tag(), Point(1, [2])]) == []

    def test_no_concrete_role_gives_empty(self):
        assert build_matrix(LISTINGS, None) == []

    def test_unregistered_dicts_without_schema(self):
        assert build_input_matrix([{'x': 1}]) == []

    def test_later_records_use_first_type_fields(self):
        rows = build_input_matrix([Point(1, [1, 2]), Tag()])
        np.testing.assert_array_equal(rows[0], [1.0, 1.0, 2.0])
        # Tag has a weight but no coords
        np.testing.assert_array_equal(rows[1], [5.0])

    def test_strict_rejects_mixed_types(self):
        with pytest.raises(HeterogeneousRecordsError):
            build_input_matrix([Point(1, [1, 2]), Tag()], strict=True)

    def test_strict_from_config(self, monkeypatch):
        monkeypatch.setitem(config.CONFIG['extraction'], 'strict_types', True)
        with pytest.raises(TypeError):
            build_input_matrix([Point(1, [1, 2]), Tag()])

    def test_strict_allows_homogeneous(self):
        assert len(build_input_matrix(LISTINGS, strict=True)) == 2


class TestExtract:

    def test_columns(self):
        result = extract(LISTINGS, Role.FEATURE)
        assert result.columns == [
            'rooms', 'sizes_0', 'sizes_1', 'kind_FLAT', 'kind_HOUSE', 'kind_VILLA',
        ]
        assert len(result) == 2

    def test_unsized_array_columns_from_first_record(self):
        result = extract([Point(1, [1, 2, 3])], Role.FEATURE)
        assert result.columns == ['weight', 'coords_0', 'coords_1', 'coords_2']

    def test_report_clean(self):
        report = extract(LISTINGS, 'feature').report
        assert report.role is Role.FEATURE
        assert report.record_type == 'Listing'
        assert report.n_rows == 2
        assert report.n_fields == 3
        assert report.n_degraded == 0
        assert report.ok

    def test_report_degraded(self):
        records = [Point(1, [1, 2]), Point(2, 'x'), Point(3, None)]
        result = extract(records, Role.FEATURE)
        assert result.report.degraded == {'coords': 2}
        assert result.report.n_degraded == 2
        assert not result.report.ok
        assert [len(r) for r in result.rows] == [3, 1, 1]

    def test_report_foreign_rows(self):
        report = extract([Point(1, [1]), Tag(), Tag()], Role.FEATURE).report
        assert report.foreign_rows == 2

    def test_degraded_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='featurize.matrix'):
            extract([Point(1, 'x')], Role.FEATURE)
        assert 'failed to flatten' in caplog.text

    def test_degraded_warning_can_be_silenced(self, caplog, monkeypatch):
        monkeypatch.setitem(config.CONFIG['extraction'], 'warn_on_degraded', False)
        with caplog.at_level(logging.WARNING, logger='featurize.matrix'):
            result = extract([Point(1, 'x')], Role.FEATURE)
        assert 'failed to flatten' not in caplog.text
        assert result.report.n_degraded == 1

    def test_mixed_types_log_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='featurize.matrix'):
            extract([Point(1, [1]), Tag()], Role.FEATURE)
        assert 'are not Point' in caplog.text

    def test_empty(self):
        result = extract([], Role.LABEL)
        assert result.rows == []
        assert result.columns == []
        assert result.report.record_type is None


class TestExtractionConversions:

    def test_to_array(self):
        arr = extract(LISTINGS, Role.FEATURE).to_array()
        assert arr.shape == (2, 6)
        assert arr.dtype == np.float64

    def test_to_array_empty(self):
        assert extract([], Role.FEATURE).to_array().shape == (0, 0)

    def test_to_array_ragged(self):
        result = extract([Point(1, [1, 2]), Point(2, 'x')], Role.FEATURE)
        with pytest.raises(RaggedMatrixError):
            result.to_array()

    def test_to_frame(self):
        df = extract(LISTINGS, Role.FEATURE).to_frame()
        assert isinstance(df, pl.DataFrame)
        assert df.columns == ['rooms', 'sizes_0', 'sizes_1', 'kind_FLAT', 'kind_HOUSE', 'kind_VILLA']
        assert df.shape == (2, 6)
        assert df['kind_HOUSE'].to_list() == [1.0, 0.0]
        assert df.schema['rooms'] == pl.Float64

    def test_to_frame_width_mismatch(self):
        # Every row lost its sizes, so rows are uniformly narrower than the columns
        records = [Listing(2, 'bad', Kind.FLAT, 1.0), Listing(3, None, Kind.VILLA, 2.0)]
        result = extract(records, Role.FEATURE)
        assert result.to_array().shape == (2, 4)
        with pytest.raises(RaggedMatrixError):
            result.to_frame()
