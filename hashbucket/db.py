# -*- coding: utf-8 -*-
"""Database handles and transaction boundaries.

A handle is either an :class:`~sqlalchemy.engine.Engine`, in which case each
operation opens (and commits or rolls back) its own transaction, or a
:class:`~sqlalchemy.engine.Connection` whose transaction belongs to the
caller.
"""

import logging
import subprocess
from collections import namedtuple
from contextlib import contextmanager

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import HashBucketError

logger = logging.getLogger(__name__)

#: Error families expected from a transaction's work. Anything else is
#: reported as a fault.
EXPECTED_ERRORS = (HashBucketError, OSError, subprocess.SubprocessError, SQLAlchemyError)


class Committed(namedtuple("Committed", ["value"])):
    """Work succeeded and its transaction was committed."""

    committed = True

    def unwrap(self):
        return self.value


class Joined(namedtuple("Joined", ["value"])):
    """Work succeeded inside the caller's transaction, which is still open."""

    committed = False

    def unwrap(self):
        return self.value


class RolledBack(namedtuple("RolledBack", ["cause", "fault"])):
    """Work raised `cause` and its transaction was rolled back. `fault` is
    true when `cause` is outside :data:`EXPECTED_ERRORS`.
    """

    committed = False

    def unwrap(self):
        raise self.cause


def is_engine(db):
    return isinstance(db, Engine)


def check_handle(db):
    if not isinstance(db, (Engine, Connection)):
        raise TypeError("expected an Engine or a Connection, got %r" % type(db).__name__)
    return db


@contextmanager
def connect(db):
    """Yield a connection of `db` for a single operation."""
    check_handle(db)
    if is_engine(db):
        with db.begin() as conn:
            yield conn
    else:
        yield db


def run_in_tx(db, work):
    """Run ``work(conn)`` in a transaction of `db` and return its outcome.

    With an engine a new transaction is started, committed when `work`
    returns and rolled back on every other exit. Interrupts such as
    ``KeyboardInterrupt`` are re-raised after the rollback. With a
    connection `work` joins the caller's transaction and exceptions
    propagate to the caller, who owns the rollback.

    Returns:
        Committed, Joined or RolledBack.
    """
    check_handle(db)
    if not is_engine(db):
        return Joined(work(db))

    with db.connect() as conn:
        tx = conn.begin()
        try:
            value = work(conn)
        except Exception as exc:
            tx.rollback()
            fault = not isinstance(exc, EXPECTED_ERRORS)
            if fault:
                logger.error("Transaction rolled back on fault", exc_info=exc)
            else:
                logger.warning("Transaction rolled back: %s", exc)
            return RolledBack(exc, fault)
        except BaseException:
            tx.rollback()
            raise

        tx.commit()
        return Committed(value)
