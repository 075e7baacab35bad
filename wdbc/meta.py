import copy
import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """Gives each Chunk instance its own copy of a field declared on the class."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            logger.debug("create field '%s' for %s", self.field.name, instance.__class__.__name__)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        # a whole field replaces the current one, anything else is a value
        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            instance.__dict__[self.field.name] = value
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if name in cls.__dict__:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Metadata about a Chunk: for now only the ordered names of its fields."""

    def __init__(self):
        self.fields = []


class MetaChunk(type):
    '''Collects the fields declared in the body of a Chunk in order of declaration,
    the same way Django does with the fields of a model.'''

    def __new__(cls, name, bases, attrs):
        kept = {
            '__module__': attrs.pop('__module__'),
        }
        if '__classcell__' in attrs:
            kept['__classcell__'] = attrs.pop('__classcell__')

        new_cls = super().__new__(cls, name, bases, kept)
        new_cls._meta = Meta()

        # fields of the parents come first
        for parent in bases:
            if not isinstance(parent, MetaChunk):
                continue
            for field_name in parent._meta.fields:
                setattr(new_cls, field_name, parent.__dict__[field_name])
                new_cls._meta.fields.append(field_name)

        for attr_name, value in attrs.items():
            new_cls.add_to_class(attr_name, value)

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_chunk'):
            logger.debug("field '%s' declared in %s", name, cls.__name__)
            cls._meta.fields.append(name)
            value.contribute_to_chunk(cls, name)
        else:
            setattr(cls, name, value)
