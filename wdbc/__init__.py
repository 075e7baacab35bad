"""
# wdbc: DBC files for humans.

A DBC is a fixed layout table: a header, an array of records all of the same size
and a block of strings referenced by offset from the records.

Three layers are defined on top of the raw bytes:

 1. DBC: the container, reads and writes the header, the records and the string
    block keeping the layout consistent.

 2. FieldMap: gives names and types to the 4-byte slots a record is made of, so
    that a Record can be decoded into a dictionary with extract().

 3. MapInference: when no mapping is known it guesses one by looking at the bits
    of the slots of a sample of records.

A typical session looks like

    dbc = DBC.create('Sample.dbc', FieldMap({'id': FieldType.UINT, 'name': FieldType.STRING}))
    dbc.add_record([1, 'John'])
    dbc.close()

    with DBC('Sample.dbc') as dbc:
        FieldMap.from_dbc(dbc)
        print(dbc.get_record_by_id(1).extract())

"""
from .enum import FieldType, FIELD_SIZE, LOCALIZATION
from .mapping import FieldMap, FieldRule
from .container import DBC, DBCHeader, HEADER_SIZE, SIGNATURE
from .record import Record
from .inference import MapInference


__all__ = [
    'DBC',
    'DBCHeader',
    'FieldMap',
    'FieldRule',
    'FieldType',
    'MapInference',
    'Record',
    'FIELD_SIZE',
    'HEADER_SIZE',
    'LOCALIZATION',
    'SIGNATURE',
]
