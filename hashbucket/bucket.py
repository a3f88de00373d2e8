# -*- coding: utf-8 -*-
"""Module for Bucket class: uploads into a content store with the ledger
kept in step.
"""

import io
import logging
from contextlib import ExitStack, closing
from typing import Any, Callable, Dict, List, Mapping

from sqlalchemy.engine import Engine

import hashbucket.utils as u

from .checks import ImageChecker
from .db import run_in_tx
from .errors import NoFilesError, UnknownBucketError
from .ledger import FileRecord, LinkLedger
from .objects import object_key
from .settings import BucketSettings, load_settings
from .sniff import detect_content_type
from .store import ContentStore

logger = logging.getLogger(__name__)

#: Content policy: ``check(content_type, size)`` raises to reject a file.
Check = Callable[[str, int], None]


class Bucket(object):
    """A configured store: content store, link ledger and settings.

    Link ledger operations are available directly on the bucket, e.g.
    ``bucket.link(obj, *hashes)`` and ``bucket.files_of(obj)``.

    Attributes:
        settings (BucketSettings): Bucket configuration.
        store (ContentStore): Where file contents live.
        ledger (LinkLedger): Which files are linked to which objects.
    """

    def __init__(self, settings: BucketSettings, engine: Engine):
        self.settings = settings
        self.store = ContentStore(
            settings.dir,
            depth=settings.dir_depth,
            algorithm=settings.algorithm,
            machines=settings.machines,
            scp_user=settings.scp_user,
            remote_root=settings.remote_dir,
        )
        self.ledger = LinkLedger(
            engine,
            links_table_name=settings.links_table,
            files_table_name=settings.files_table,
            algorithm=settings.algorithm,
        )

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def engine(self) -> Engine:
        return self.ledger.engine

    def create_tables(self, db=None, files=True) -> None:
        self.ledger.create_tables(db=db, files=files)

    def link(self, obj, *hashes, db=None) -> None:
        self.ledger.link(obj, *hashes, db=db)

    def link_only(self, obj, *hashes, db=None) -> None:
        self.ledger.link_only(obj, *hashes, db=db)

    def unlink(self, obj, *hashes, db=None) -> None:
        self.ledger.unlink(obj, *hashes, db=db)

    def unlink_all_of(self, obj, db=None) -> None:
        self.ledger.unlink_all_of(obj, db=db)

    def linked(self, obj, hashid, db=None) -> bool:
        return self.ledger.linked(obj, hashid, db=db)

    def ensure_linked(self, obj, hashid, db=None) -> None:
        self.ledger.ensure_linked(obj, hashid, db=db)

    def files_of(self, obj, db=None) -> List[str]:
        return self.ledger.files_of(obj, db=db)

    def check_file(self, *hashes, db=None) -> None:
        self.ledger.check_file(*hashes, db=db)

    def file_path(self, hashid: str) -> str:
        """Return the path of `hashid` relative to the bucket directory."""
        return self.store.file_path(hashid)

    def save(self, check: Check, obj, *files, db=None) -> List[str]:
        """Save files into storage. If `obj` is not empty the files are
        linked to it.

        File records and links are written in one transaction together with
        the file contents: when `db` is an engine (the default) any failure
        rolls the ledger back, so the whole call can be retried.

        Args:
            check: Content policy called with the detected content type and
                size of each file before anything is written.
            obj: :class:`~hashbucket.objects.LinkObject` or link object
                string, may be empty.
            *files: Readable binary objects, ``bytes`` or file paths.
            db: Engine or connection, defaults to the bucket's engine.

        Returns:
            list: Content hashes in the order of `files`.
        """
        if not files:
            return []
        with ExitStack() as stack:
            streams = [stack.enter_context(closing(u.Stream(f))) for f in files]
            outcome = run_in_tx(
                self.ledger.handle(db), lambda conn: self._save(conn, check, obj, streams)
            )
        return outcome.unwrap()

    def upload(self, check: Check, obj, *paths, db=None) -> List[str]:
        """Open the files at `paths`, save them and close them."""
        with ExitStack() as stack:
            files = [stack.enter_context(io.open(path, "rb")) for path in paths]
            return self.save(check, obj, *files, db=db)

    def _save(self, conn, check, obj, streams):
        records = self._create_file_records(conn, check, streams)
        hashes = [record.hash for record in records]

        key = object_key(obj)
        if key:
            self.ledger.link(key, *hashes, db=conn)

        for record, stream in zip(records, streams):
            self.store.save_file(stream, record.hash)

        logger.info("Saved %d file(s) to bucket %r: %s", len(hashes), self.name, hashes)
        return hashes

    def _create_file_records(self, conn, check, streams):
        sized = []
        for stream in streams:
            size = stream.size()
            content_type = detect_content_type(stream.head())
            check(content_type, size)
            sized.append((size, content_type))

        records = [
            FileRecord(self.store.computehash(stream), size, content_type)
            for stream, (size, content_type) in zip(streams, sized)
        ]
        self.ledger.add_files(records, db=conn)
        return records


_buckets: Dict[str, Bucket] = {}


def register_bucket(bucket: Bucket, name: str = None) -> Bucket:
    """Make `bucket` available to :func:`get_bucket`."""
    _buckets[bucket.name if name is None else name] = bucket
    return bucket


def get_bucket(name: str) -> Bucket:
    """Return the bucket registered as `name`.

    Raises:
        UnknownBucketError: If there is none.
    """
    try:
        return _buckets[name]
    except KeyError:
        raise UnknownBucketError(name) from None


def configure(config: Mapping[str, Any], engine: Engine, create_tables=False):
    """Create and register a bucket for each entry of `config`.

    Returns:
        dict: Buckets keyed by name.
    """
    buckets = {}
    for name, settings in load_settings(config).items():
        bucket = Bucket(settings, engine)
        if create_tables:
            bucket.create_tables()
        buckets[name] = register_bucket(bucket)
    return buckets


def upload_images(bucket_name: str, link_object, files, lang=None, db=None) -> List[str]:
    """Save uploaded images into the bucket `bucket_name`, linking them to
    `link_object` when it's not empty.
    """
    if not files:
        raise NoFilesError(lang)
    bucket = get_bucket(bucket_name)
    return bucket.save(ImageChecker(lang), link_object, *files, db=db)
