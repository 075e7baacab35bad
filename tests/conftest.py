import logging
import os

import pytest

from wdbc import DBC, FieldMap, FieldType


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


@pytest.fixture
def dbc_path(tmp_path):
    return str(tmp_path / 'Sample.dbc')


@pytest.fixture
def person_map():
    field_map = FieldMap()
    field_map.add('id', FieldType.UINT)
    field_map.add('name', FieldType.STRING)
    field_map.add('points', FieldType.INT)
    field_map.add('height', FieldType.FLOAT)

    return field_map


@pytest.fixture
def people(dbc_path, person_map):
    dbc = DBC.create(dbc_path, person_map)
    dbc.add_records([
        [1, 'John', 100, 1.80],
        [2, 'Jane', -20, 1.65],
        [7, 'Bob', 0, 1.75],
    ])

    yield dbc

    dbc.close()


@pytest.fixture
def write_raw(tmp_path):
    '''Writes raw bytes as a DBC file and returns its path.'''
    def _write_raw(data, name='Raw.dbc'):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write_raw
