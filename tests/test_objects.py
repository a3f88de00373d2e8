# -*- coding: utf-8 -*-

import pytest
from pydantic import BaseModel, ValidationError

from hashbucket import InvalidObjectError, LinkObject


@pytest.mark.parametrize(
    "obj,expected",
    [
        (LinkObject("photos", 42, "avatar"), "photos|42|avatar"),
        (LinkObject("photos", 42), "photos|42"),
        (LinkObject("public.users", 0), "public.users|0"),
        (LinkObject(), ""),
    ],
)
def test_link_object_round_trip(obj, expected):
    assert str(obj) == expected
    assert LinkObject.parse(str(obj)) == obj


def test_link_object_zero_value():
    assert LinkObject.parse("") == LinkObject()
    assert LinkObject.parse(None) == LinkObject()
    assert not LinkObject()
    assert LinkObject("photos", 1)


@pytest.mark.parametrize(
    "value",
    [
        "bad string",
        "photos",
        "photos|",
        "photos|-1",
        "photos|1|",
        "photos|1|a-b",
        "photos|1|a|b",
        "|1",
        "photos|99999999999999999999",
        u"照片|1",
    ],
)
def test_link_object_parse_error(value):
    with pytest.raises(InvalidObjectError):
        LinkObject.parse(value)


def test_link_object_json():
    obj = LinkObject("photos", 42, "avatar")

    assert obj.to_json() == '"photos|42|avatar"'
    assert LinkObject.from_json(obj.to_json()) == obj
    assert LinkObject.from_json(b'"photos|42|avatar"') == obj
    assert LinkObject.from_json("photos|42") == LinkObject("photos", 42)
    assert LinkObject.from_json('""') == LinkObject()
    assert LinkObject().to_json() == '""'

    with pytest.raises(InvalidObjectError):
        LinkObject.from_json(b"")


class Upload(BaseModel):
    link_object: LinkObject


def test_link_object_pydantic_scalar():
    upload = Upload.model_validate_json('{"link_object": "photos|42|avatar"}')

    assert upload.link_object == LinkObject("photos", 42, "avatar")
    assert upload.model_dump_json() == '{"link_object":"photos|42|avatar"}'
    assert Upload(link_object="").link_object == LinkObject()

    with pytest.raises(ValidationError):
        Upload(link_object="bad string")
