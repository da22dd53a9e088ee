"""Tests for the featurize command line."""

import json

import polars as pl
import pytest

from featurize.cli import main, read_records

SCHEMA = """\
fields:
  - name: rooms
    role: feature
  - name: sizes
    role: feature
    shape: array
    length: 2
  - name: kind
    role: feature
    shape: enum
    domain: [flat, house, villa]
  - name: price
    role: label
"""

RECORDS = [
    {'rooms': 3, 'sizes': [40, 12], 'kind': 'house', 'price': 250000},
    {'rooms': 1, 'sizes': [25, 0], 'kind': 'flat', 'price': 90000},
    {'rooms': 5, 'sizes': [80, 30], 'kind': 'villa', 'price': 700000},
]


@pytest.fixture
def files(tmp_path):
    schema = tmp_path / 'listing.yaml'
    schema.write_text(SCHEMA)
    records = tmp_path / 'listings.jsonl'
    records.write_text(''.join(json.dumps(r) + '\n' for r in RECORDS))
    return tmp_path, schema, records


class TestReadRecords:

    def test_jsonl(self, files):
        _, _, records = files
        assert read_records(records) == RECORDS

    def test_json(self, tmp_path):
        path = tmp_path / 'r.json'
        path.write_text(json.dumps(RECORDS))
        assert read_records(path) == RECORDS

    def test_csv(self, tmp_path):
        path = tmp_path / 'r.csv'
        path.write_text('a,b\n1,2\n3,4\n')
        assert read_records(path) == [{'a': 1, 'b': 2}, {'a': 3, 'b': 4}]

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            read_records(tmp_path / 'r.xml')


class TestExtractCommand:

    def test_features_to_csv(self, files, capsys):
        tmp_path, schema, records = files
        out = tmp_path / 'X.csv'
        code = main(['extract', '--schema', str(schema), '--input', str(records), '--output', str(out)])
        assert code == 0
        assert 'Extracted 3 rows x 6 columns' in capsys.readouterr().out

        df = pl.read_csv(out)
        assert df.columns == ['rooms', 'sizes_0', 'sizes_1', 'kind_flat', 'kind_house', 'kind_villa']
        assert df.row(0) == (3.0, 40.0, 12.0, 0.0, 1.0, 0.0)

    def test_labels_to_parquet(self, files):
        tmp_path, schema, records = files
        out = tmp_path / 'y.parquet'
        code = main(['extract', '--schema', str(schema), '--input', str(records),
                     '--role', 'label', '--output', str(out)])
        assert code == 0
        assert pl.read_parquet(out)['price'].to_list() == [250000.0, 90000.0, 700000.0]

    def test_missing_input_fails(self, files, capsys):
        tmp_path, schema, _ = files
        code = main(['extract', '--schema', str(schema), '--input', str(tmp_path / 'none.jsonl')])
        assert code == 1
        assert 'Error' in capsys.readouterr().err

    def test_bad_schema_fails(self, files):
        tmp_path, _, records = files
        bad = tmp_path / 'bad.yaml'
        bad.write_text('fields: nope\n')
        assert main(['extract', '--schema', str(bad), '--input', str(records)]) == 1

    def test_unparseable_schema_fails(self, files, capsys):
        tmp_path, _, records = files
        bad = tmp_path / 'broken.yaml'
        bad.write_text('fields: [unclosed\n')
        assert main(['extract', '--schema', str(bad), '--input', str(records)]) == 1
        assert 'Error' in capsys.readouterr().err


class TestColumnsCommand:

    def test_lists_columns(self, files, capsys):
        _, schema, _ = files
        assert main(['columns', '--schema', str(schema), '--role', 'label']) == 0
        assert capsys.readouterr().out.split() == ['price']


class TestSplitCommand:

    def test_writes_both_slices(self, files, capsys):
        tmp_path, _, records = files
        train = tmp_path / 'train.jsonl'
        test = tmp_path / 'test.jsonl'
        code = main(['split', '--input', str(records), '--ratio', '0.67', '--seed', '5',
                     '--train', str(train), '--test', str(test)])
        assert code == 0
        train_rows = read_records(train)
        test_rows = read_records(test)
        assert len(train_rows) == 2
        assert len(test_rows) == 1
        assert sorted(r['rooms'] for r in train_rows + test_rows) == [1, 3, 5]
