# -*- coding: utf-8 -*-

import pytest
from sqlalchemy import create_engine, func, select

import hashbucket
from hashbucket.ledger import FileRecord
from hashbucket.utils import Stream, computehash


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.fixture
def testpath(tmp_path):
    path = tmp_path / "hashbucket"
    path.mkdir()
    return path


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        "sqlite:///{0}".format(tmp_path / "ledger.db"), connect_args={"timeout": 30}
    )
    yield engine
    engine.dispose()


@pytest.fixture
def settings(testpath):
    return hashbucket.BucketSettings(name="images", dir=str(testpath), dir_depth=2)


@pytest.fixture
def bucket(settings, engine):
    bucket = hashbucket.Bucket(settings, engine)
    bucket.create_tables()
    return bucket


@pytest.fixture
def ledger(bucket):
    return bucket.ledger


def png(payload):
    """Return PNG-looking content that differs per `payload`."""
    return PNG + payload


def sha256(content):
    return computehash(Stream(content))


def add_files(ledger, *contents):
    """Insert file records for `contents` and return their hashes."""
    hashes = [sha256(content) for content in contents]
    ledger.add_files([FileRecord(h, len(c), "image/png") for h, c in zip(hashes, contents)])
    return hashes


def count_rows(engine, table):
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()
