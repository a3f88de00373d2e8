# -*- coding: utf-8 -*-
"""Module for LinkLedger class."""

import logging
from collections import namedtuple
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import MetaData, delete, inspect, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine

import hashbucket.utils as u

from .db import connect, run_in_tx
from .errors import (
    EmptyObjectError,
    FileNotExistsError,
    InvalidHashError,
    NotLinkedError,
)
from .objects import object_key
from .schema import files_table, links_table

logger = logging.getLogger(__name__)


class FileRecord(namedtuple("FileRecord", ["hash", "size", "content_type"])):
    """Metadata row of one distinct file content."""


class LinkLedger(object):
    """Transactional record of which files are linked to which objects.

    Every operation takes an optional `db` handle: an ``Engine`` to run in its
    own transaction or a ``Connection`` to join the caller's transaction.
    It defaults to :attr:`engine`.

    Attributes:
        engine (Engine): Default database handle.
        links (Table): Link table, one row per (file, object) pair.
        files (Table): Files table, one row per distinct content hash.
        algorithm (str): Hash algorithm whose hex digests are valid file
            hashes.
    """

    def __init__(
        self,
        engine: Engine,
        links_table_name: str = "file_links",
        files_table_name: str = "files",
        algorithm: str = "sha256",
    ):
        self.engine = engine
        self.metadata = MetaData()
        self.links = links_table(links_table_name, self.metadata)
        self.files = files_table(files_table_name, self.metadata)
        self.algorithm = algorithm
        self._files_columns = None

    def create_tables(self, db=None, files=True) -> None:
        """Create the link table and its indexes, and the files table unless
        `files` is false. Existing tables are left untouched.
        """
        tables = [self.links, self.files] if files else [self.links]
        with connect(self.handle(db)) as conn:
            self.metadata.create_all(conn, tables=tables, checkfirst=True)
        self._files_columns = None

    def check_hash(self, *hashes: str) -> None:
        """Ensure every hash is a hex digest of :attr:`algorithm`.

        Raises:
            InvalidHashError: Listing the malformed hashes.
        """
        invalid = [h for h in hashes if not u.is_hash(h, self.algorithm)]
        if invalid:
            raise InvalidHashError(invalid)

    def add_files(self, records: List[FileRecord], db=None) -> None:
        """Insert a file record per distinct hash. Existing records are kept.

        Only columns present in the files table are written: tables owned by
        other applications may have nothing but ``hash``.
        """
        if not records:
            return
        now = _now()
        rows = {}
        for record in records:
            rows.setdefault(
                record.hash,
                {
                    "hash": record.hash,
                    "size": record.size,
                    "content_type": record.content_type,
                    "created_at": now,
                },
            )
        with connect(self.handle(db)) as conn:
            columns = self.files_columns(conn)
            values = [
                {name: value for name, value in row.items() if name in columns}
                for row in rows.values()
            ]
            stmt = _insert(conn, self.files).values(values)
            conn.execute(stmt.on_conflict_do_nothing(index_elements=["hash"]))

    def files_columns(self, conn) -> frozenset:
        """Return the column names of the files table in the database."""
        if self._files_columns is None:
            columns = inspect(conn).get_columns(self.files.name, schema=self.files.schema)
            self._files_columns = frozenset(column["name"] for column in columns)
        return self._files_columns

    def check_file(self, *hashes: str, db=None) -> None:
        """Ensure every hash has a file record.

        Raises:
            FileNotExistsError: Listing the hashes without a record.
        """
        if not hashes:
            return
        with connect(self.handle(db)) as conn:
            found = set(
                conn.execute(
                    select(self.files.c.hash).where(self.files.c.hash.in_(_unique(hashes)))
                ).scalars()
            )
        missing = [h for h in _unique(hashes) if h not in found]
        if missing:
            raise FileNotExistsError(missing)

    def link(self, obj, *hashes: str, db=None) -> None:
        """Link files to `obj`. Pairs already linked are skipped.

        Raises:
            EmptyObjectError: If `obj` is empty.
            InvalidHashError: If any hash is malformed.
            FileNotExistsError: If any hash has no file record.
        """
        key = _require_object(obj)
        if _empty(hashes):
            return
        self.check_hash(*hashes)

        with connect(self.handle(db)) as conn:
            self.check_file(*hashes, db=conn)

            # Strictly increasing timestamps keep the order of `hashes` when
            # listing files of the object.
            now = _now()
            rows = [
                {"file": h, "object": key, "created_at": now + timedelta(microseconds=i)}
                for i, h in enumerate(_unique(hashes))
            ]
            stmt = _insert(conn, self.links).values(rows)
            conn.execute(stmt.on_conflict_do_nothing(index_elements=["file", "object"]))
        logger.debug("Linked %s to %s", list(hashes), key)

    def link_only(self, obj, *hashes: str, db=None) -> None:
        """Make sure these files and only these files are linked to `obj`."""
        key = _require_object(obj)
        if _empty(hashes):
            return self._unlink(key, db=db)

        def work(conn):
            self.link(key, *hashes, db=conn)
            self._unlink(key, self.links.c.file.not_in(_unique(hashes)), db=conn)

        run_in_tx(self.handle(db), work).unwrap()

    def unlink(self, obj, *hashes: str, db=None) -> None:
        """Unlink files from `obj`."""
        key = _require_object(obj)
        if _empty(hashes):
            return
        self.check_hash(*hashes)
        self._unlink(key, self.links.c.file.in_(_unique(hashes)), db=db)

    def unlink_all_of(self, obj, db=None) -> None:
        """Unlink all linked files from `obj`."""
        self._unlink(_require_object(obj), db=db)

    def linked(self, obj, hashid: str, db=None) -> bool:
        """Check if `hashid` is linked to `obj`."""
        self.check_hash(hashid)
        stmt = select(self.links.c.file).where(
            self.links.c.object == object_key(obj), self.links.c.file == hashid
        )
        with connect(self.handle(db)) as conn:
            return conn.execute(stmt).first() is not None

    def ensure_linked(self, obj, hashid: str, db=None) -> None:
        """Ensure `hashid` is linked to `obj`.

        Raises:
            NotLinkedError: If it isn't.
        """
        if not self.linked(obj, hashid, db=db):
            raise NotLinkedError()

    def files_of(self, obj, db=None) -> List[str]:
        """Return the hashes linked to `obj` in the order they were linked."""
        stmt = (
            select(self.links.c.file)
            .where(self.links.c.object == object_key(obj))
            .order_by(self.links.c.created_at, self.links.c.file)
        )
        with connect(self.handle(db)) as conn:
            return list(conn.execute(stmt).scalars())

    def _unlink(self, key, *conds, db=None):
        stmt = delete(self.links).where(self.links.c.object == key, *conds)
        with connect(self.handle(db)) as conn:
            result = conn.execute(stmt)
            logger.debug("Unlinked %d file(s) from %s", result.rowcount, key)

    def handle(self, db=None):
        """Return `db`, or :attr:`engine` when it is None."""
        return self.engine if db is None else db


def _insert(conn, table):
    """Return an INSERT supporting ``on_conflict_do_nothing`` for the
    dialect of `conn`.
    """
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)


def _require_object(obj):
    key = object_key(obj)
    if key == "":
        raise EmptyObjectError()
    return key


def _empty(hashes):
    return len(hashes) == 0 or (len(hashes) == 1 and hashes[0] == "")


def _unique(items):
    return list(dict.fromkeys(items))


def _now():
    return datetime.now(timezone.utc)
