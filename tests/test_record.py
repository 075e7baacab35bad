import pytest

from wdbc import DBC, FieldMap, FieldType
from wdbc.exceptions import NoMapAttachedException, NotWritableException


def test_record_get(people):
    record = people.get_record(1)

    assert record.id == 2
    assert record.offset == 20 + 16
    assert record.get(0) == 2
    assert record.get_string(1) == 'Jane'
    assert record.get_int(2) == -20
    assert record.get_uint(2) == 2 ** 32 - 20
    assert record.get_float(3) == pytest.approx(1.65)
    assert record.get(4) is None
    assert record.get(-1) is None


def test_record_get_by_name(people):
    record = people.get_record(0)

    assert record.get_by_name('name', FieldType.STRING) == 'John'
    assert record.get_by_name('points', FieldType.INT) == 100
    assert record.get_by_name('missing') is None


def test_record_get_by_name_without_map(dbc_path):
    with DBC.create(dbc_path, 2) as dbc:
        dbc.attach(FieldMap({'id': FieldType.UINT, 'value': FieldType.UINT}))
        dbc.add_record([1, 2])
        dbc.attach(None)

        record = dbc.get_record(0)
        assert record.get(1) == 2
        with pytest.raises(NoMapAttachedException):
            record.get_by_name('value')
        with pytest.raises(NoMapAttachedException):
            record.extract()

        assert record.extract(FieldMap({'id': None, 'value': None})) == {'id': 1, 'value': 2}


def test_record_set(people, dbc_path, person_map):
    record = people.get_record(0)

    record.set_string(1, 'Johnny')
    record.set_by_name('points', -5, FieldType.INT)
    record.set_float(3, 2.5)
    # outside the record: nothing happens
    record.set(10, 1)

    assert record.extract() == {'id': 1, 'name': 'Johnny', 'points': -5, 'height': 2.5}
    # the same record obtained again sees the changes
    assert people.get_record(0).get_string(1) == 'Johnny'

    people.close()

    with DBC(dbc_path, person_map) as dbc:
        assert dbc.get_record(0).extract() == {'id': 1, 'name': 'Johnny', 'points': -5, 'height': 2.5}
        assert dbc.get_record(1).extract()['name'] == 'Jane'


def test_record_set_id_updates_index(people):
    assert people.get_record_by_id(2).position == 1

    record = people.get_record(1)
    record.set_uint(0, 42)

    assert record.id == 42
    assert people.get_record_by_id(2) is None
    assert people.get_record_by_id(42) == record
    for other in people:
        assert people.get_record_by_id(other.id) == other


def test_record_set_id_before_index(people):
    people.get_record(2).set_uint(0, 99)

    assert people.get_record_by_id(7) is None
    assert people.get_record_by_id(99).position == 2


def test_record_set_read_only(people, dbc_path, person_map):
    people.close()

    with DBC(dbc_path, person_map, readonly=True) as dbc:
        record = dbc.get_record(0)
        with pytest.raises(NotWritableException):
            record.set_uint(0, 3)
        assert record.get_string(1) == 'John'


def test_record_extract_repeated_fields(dbc_path):
    field_map = FieldMap()
    field_map.add('id')
    field_map.add('title', FieldType.STRING_LOC, 2)
    field_map.add('pos', FieldType.FLOAT, 3)

    with DBC.create(dbc_path, field_map) as dbc:
        dbc.add_record([5, 'hello', 'world', 1.0, 2.0, 3.0])
        record = dbc.get_record(0)

        assert record.extract() == {
            'id': 5,
            'title1': 'hello',
            'title2': 'world',
            'pos1': 1.0,
            'pos2': 2.0,
            'pos3': 3.0,
        }
        assert record.get_by_name('title2', FieldType.STRING) == 'world'
        assert record.get_by_name('pos3', FieldType.FLOAT) == 3.0


def test_record_raw_slots_and_dump(people):
    record = people.get_record(2)

    slots = record.as_raw_slots()
    assert len(slots) == 4
    assert slots[0] == 7
    assert people.get_string(slots[1]) == 'Bob'

    assert record.dump().splitlines()[:2] == ['record #2', '  field1: 7']
    assert "  name: 'Bob'" in record.dump(use_map=True).splitlines()
