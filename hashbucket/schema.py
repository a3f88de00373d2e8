# -*- coding: utf-8 -*-
"""SQLAlchemy Core table definitions of a bucket's ledger."""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)


def _split(name):
    schema, _, table = name.rpartition(".")
    return schema or None, table


def links_table(name: str = "file_links", metadata: MetaData = None) -> Table:
    """Return the link table `name`: one row per (file, object) pair."""
    schema, table = _split(name)
    return Table(
        table,
        metadata if metadata is not None else MetaData(),
        Column("file", Text, nullable=False),
        Column("object", Text, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        UniqueConstraint("file", "object", name="%s_file_object_key" % table),
        Index("%s_object_index" % table, "object"),
        schema=schema,
    )


def files_table(name: str = "files", metadata: MetaData = None) -> Table:
    """Return the files table `name`. Only ``hash`` is required of tables
    owned by other applications.
    """
    schema, table = _split(name)
    return Table(
        table,
        metadata if metadata is not None else MetaData(),
        Column("hash", String(128), primary_key=True),
        Column("size", BigInteger),
        Column("content_type", Text),
        Column("created_at", DateTime(timezone=True)),
        schema=schema,
    )
