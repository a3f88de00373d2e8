# -*- coding: utf-8 -*-

import pytest

from hashbucket import (
    EmptyObjectError,
    FileNotExistsError,
    InvalidHashError,
    LinkObject,
    NotLinkedError,
    is_file_not_exists,
    is_not_linked,
)

from conftest import add_files, count_rows, sha256


OBJECT = "photos|42|avatar"


@pytest.fixture
def hashes(ledger):
    return add_files(ledger, b"a", b"b", b"c")


def test_create_tables_is_idempotent(ledger):
    ledger.create_tables()
    ledger.create_tables()


def test_link(ledger, hashes):
    ledger.link(OBJECT, *hashes)

    assert ledger.files_of(OBJECT) == hashes
    assert all(ledger.linked(OBJECT, h) for h in hashes)


def test_link_is_idempotent(ledger, engine, hashes):
    ledger.link(OBJECT, hashes[0])
    ledger.link(OBJECT, hashes[0])
    ledger.link(OBJECT, hashes[0], hashes[0])

    assert count_rows(engine, ledger.links) == 1
    assert ledger.files_of(OBJECT) == [hashes[0]]


def test_link_accepts_link_object(ledger, hashes):
    ledger.link(LinkObject("photos", 42, "avatar"), hashes[0])

    assert ledger.files_of(OBJECT) == [hashes[0]]


def test_link_file_not_exists(ledger, engine, hashes):
    missing = sha256(b"missing")

    with pytest.raises(FileNotExistsError) as excinfo:
        ledger.link(OBJECT, hashes[0], missing)

    assert excinfo.value.missing == [missing]
    assert excinfo.value.code == "file-not-exists"
    assert is_file_not_exists(excinfo.value)
    assert count_rows(engine, ledger.links) == 0


@pytest.mark.parametrize("bad", ["abc", "Z" * 64, "A" * 64])
def test_link_invalid_hash(ledger, hashes, bad):
    with pytest.raises(InvalidHashError) as excinfo:
        ledger.link(OBJECT, hashes[0], bad)

    assert excinfo.value.hashes == [bad]


def test_link_empty_object(ledger, hashes):
    with pytest.raises(EmptyObjectError):
        ledger.link("", *hashes)

    with pytest.raises(EmptyObjectError):
        ledger.link(LinkObject(), *hashes)


@pytest.mark.parametrize("empty", [(), ("",)])
def test_link_nothing(ledger, engine, empty):
    ledger.link(OBJECT, *empty)

    assert count_rows(engine, ledger.links) == 0


def test_link_only_reconciles(ledger, hashes):
    ledger.link_only(OBJECT, hashes[0])
    ledger.link_only(OBJECT, hashes[1])

    assert ledger.files_of(OBJECT) == [hashes[1]]

    ledger.link_only(OBJECT, hashes[1], hashes[2])

    assert ledger.files_of(OBJECT) == [hashes[1], hashes[2]]


def test_link_only_empty_unlinks_all(ledger, hashes):
    ledger.link(OBJECT, *hashes)
    ledger.link_only(OBJECT)

    assert ledger.files_of(OBJECT) == []


def test_link_only_failure_keeps_links(ledger, hashes):
    ledger.link(OBJECT, hashes[0])

    with pytest.raises(FileNotExistsError):
        ledger.link_only(OBJECT, sha256(b"missing"))

    assert ledger.files_of(OBJECT) == [hashes[0]]


def test_unlink(ledger, hashes):
    ledger.link(OBJECT, *hashes)
    ledger.link("photos|43", hashes[0])

    ledger.unlink(OBJECT, hashes[0], hashes[2])
    ledger.unlink(OBJECT, hashes[0])

    assert ledger.files_of(OBJECT) == [hashes[1]]
    assert ledger.files_of("photos|43") == [hashes[0]]


def test_unlink_errors(ledger, hashes):
    with pytest.raises(EmptyObjectError):
        ledger.unlink("", hashes[0])

    with pytest.raises(InvalidHashError):
        ledger.unlink(OBJECT, "abc")

    ledger.unlink(OBJECT)


def test_unlink_all_of(ledger, hashes):
    ledger.link(OBJECT, *hashes)
    ledger.link("photos|43", hashes[0])

    ledger.unlink_all_of(OBJECT)

    assert ledger.files_of(OBJECT) == []
    assert ledger.files_of("photos|43") == [hashes[0]]

    with pytest.raises(EmptyObjectError):
        ledger.unlink_all_of("")


def test_linked_and_ensure_linked(ledger, hashes):
    ledger.link(OBJECT, hashes[0])

    assert ledger.linked(OBJECT, hashes[0])
    assert not ledger.linked(OBJECT, hashes[1])
    assert not ledger.linked("photos|43", hashes[0])

    ledger.ensure_linked(OBJECT, hashes[0])

    with pytest.raises(NotLinkedError) as excinfo:
        ledger.ensure_linked(OBJECT, hashes[1])

    assert is_not_linked(excinfo.value)

    with pytest.raises(InvalidHashError):
        ledger.linked(OBJECT, "abc")


def test_files_of_orders_by_link_time(ledger, hashes):
    ledger.link(OBJECT, hashes[2])
    ledger.link(OBJECT, hashes[0], hashes[1])

    assert ledger.files_of(OBJECT) == [hashes[2], hashes[0], hashes[1]]
    assert ledger.files_of("photos|1") == []


def test_check_file(ledger, hashes):
    ledger.check_file(*hashes)
    ledger.check_file()

    missing = [sha256(b"x"), sha256(b"y")]
    with pytest.raises(FileNotExistsError) as excinfo:
        ledger.check_file(hashes[0], *missing)

    assert excinfo.value.missing == missing


def test_add_files_is_idempotent(ledger, engine):
    add_files(ledger, b"a", b"a")
    add_files(ledger, b"a")

    assert count_rows(engine, ledger.files) == 1


def test_operations_join_caller_transaction(ledger, engine, hashes):
    with engine.connect() as conn:
        with conn.begin() as tx:
            ledger.link(OBJECT, *hashes, db=conn)
            ledger.link_only(OBJECT, hashes[0], db=conn)
            assert ledger.files_of(OBJECT, db=conn) == [hashes[0]]
            tx.rollback()

    assert ledger.files_of(OBJECT) == []
