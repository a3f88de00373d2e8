# -*- coding: utf-8 -*-
"""hashbucket is a content-addressable file store with a link ledger. What
does that mean? Files are saved under their content hash, each distinct
content exactly once, and a database table records which application objects
every file is linked to.

Typical use cases for this kind of system are ones where:

- Files are written once and never change (e.g. image storage).
- It's desirable to have no duplicate files (e.g. user uploads).
- Files belong to records stored elsewhere (e.g. in a database) and must be
  copied to every machine serving them.
"""

import logging

from .__meta__ import (
    __title__,
    __summary__,
    __version__,
    __author__,
    __license__,
)

from .bucket import Bucket, configure, get_bucket, register_bucket, upload_images
from .checks import ImageChecker
from .errors import (
    ArgsError,
    EmptyObjectError,
    FileNotExistsError,
    FileSizeError,
    FileTypeError,
    HashBucketError,
    InvalidFileError,
    InvalidHashError,
    InvalidObjectError,
    NoFilesError,
    NotLinkedError,
    UnknownBucketError,
    is_file_not_exists,
    is_not_linked,
)
from .ledger import LinkLedger
from .objects import LinkObject
from .settings import BucketSettings
from .store import ContentStore
from .utils import HashAddress


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = (
    "ArgsError",
    "Bucket",
    "BucketSettings",
    "ContentStore",
    "EmptyObjectError",
    "FileNotExistsError",
    "FileSizeError",
    "FileTypeError",
    "HashAddress",
    "HashBucketError",
    "ImageChecker",
    "InvalidFileError",
    "InvalidHashError",
    "InvalidObjectError",
    "LinkLedger",
    "LinkObject",
    "NoFilesError",
    "NotLinkedError",
    "UnknownBucketError",
    "configure",
    "get_bucket",
    "is_file_not_exists",
    "is_not_linked",
    "register_bucket",
    "upload_images",
)
