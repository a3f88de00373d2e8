# -*- coding: utf-8 -*-
"""Link objects: the string identifiers of the application entities files are
linked to.

The canonical encoding is ``table|id`` or ``table|id|field``, and the zero
value encodes to the empty string.
"""

import json
import re
from collections import namedtuple

from pydantic_core import core_schema

from .errors import InvalidObjectError

OBJECT_PATTERN = re.compile(r"\A([\w.]+)\|(\d+)(?:\|(\w+))?\Z", re.ASCII)

_MAX_ID = (1 << 63) - 1


class LinkObject(namedtuple("LinkObject", ["table", "id", "field"])):
    """Structured reference for a link object string.

    Attributes:
        table (str): Table name, required.
        id (int): Primary key or unique key, required.
        field (str): Required when the table has several file fields,
            otherwise empty.
    """

    def __new__(cls, table="", id=0, field=""):
        return super(LinkObject, cls).__new__(cls, table, id, field)

    def __str__(self):
        if self.is_zero():
            return ""
        s = "%s|%d" % (self.table, self.id)
        if self.field:
            s += "|" + self.field
        return s

    def __bool__(self):
        return not self.is_zero()

    def is_zero(self):
        return self.table == "" and self.id == 0 and self.field == ""

    @classmethod
    def parse(cls, value):
        """Parse a link object string. The empty string parses to the zero
        value.

        Raises:
            InvalidObjectError: If `value` is not ``name|digits(|word)?``.
        """
        if value is None or value == "":
            return cls()
        if not isinstance(value, str):
            raise InvalidObjectError(value)

        match = OBJECT_PATTERN.match(value)
        if match is None:
            raise InvalidObjectError(value)

        table, id_, field = match.groups()
        id_ = int(id_)
        if id_ > _MAX_ID:
            raise InvalidObjectError(value)

        return cls(table, id_, field or "")

    def to_json(self):
        """Marshal to a JSON string scalar."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, data):
        """Unmarshal from JSON text. Both a quoted JSON string and the bare
        ``table|id|field`` text are accepted.
        """
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf8")
        if not data:
            raise InvalidObjectError(data)
        if data[0] == '"':
            data = json.loads(data)
        return cls.parse(data)

    @classmethod
    def __get_pydantic_core_schema__(cls, source, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def _validate(cls, value):
        if isinstance(value, cls):
            return value
        return cls.parse(value)


def object_key(obj):
    """Return the canonical string of a :class:`LinkObject` or string."""
    if obj is None:
        return ""
    return str(obj)
