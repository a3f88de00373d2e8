# -*- coding: utf-8 -*-


"""
common utils for hashbucket
"""


import hashlib
import io
import os
import posixpath
import re
from collections import namedtuple
from functools import lru_cache
from typing import List

import fsspec
from fsspec.implementations.local import LocalFileSystem

from .errors import InvalidFileError

#: Number of bytes :class:`Stream` reads at a time.
CHUNK_SIZE = 64 * 1024

#: Number of leading bytes used for content type detection.
SNIFF_LEN = 512


def compact(items):
    """Return only truthy elements of `items`."""
    return [item for item in items if item]


def shard(digest: str, depth: int) -> List[str]:
    # This creates a list of `depth` single character tokens from the first
    # part of the digest followed by the full digest as the file name.
    return compact([digest[i : i + 1] for i in range(depth)] + [digest])


def file_path(digest: str, depth: int) -> str:
    """Return the relative, ``/`` separated storage path of `digest`.

    ``file_path("abcdef", 2) == "a/b/abcdef"``
    """
    return posixpath.join(*shard(digest, depth))


@lru_cache(maxsize=None)
def hash_pattern(algorithm: str):
    """Return the compiled pattern matching hex digests of `algorithm`."""
    size = hashlib.new(algorithm).digest_size
    return re.compile(r"\A[0-9a-f]{%d}\Z" % (size * 2))


def is_hash(value, algorithm: str = "sha256") -> bool:
    """Return whether `value` is a hex digest produced by `algorithm`."""
    return isinstance(value, str) and bool(hash_pattern(algorithm).match(value))


def load_fs(root):
    """Return ``(filesystem, root_path)`` for a path, fsspec URL or a
    ``(filesystem, root_path)`` pair.
    """
    if isinstance(root, tuple):
        return root
    return fsspec.core.url_to_fs(os.fspath(root))


def is_local_fs(fs) -> bool:
    """Return whether paths of `fs` are paths on this machine's disk."""
    return isinstance(fs, LocalFileSystem)


def computehash(stream, algorithm="sha256") -> str:
    """Compute hash of `stream` using `algorithm`."""
    hashobj = hashlib.new(algorithm)
    for data in stream:
        hashobj.update(data)
    return hashobj.hexdigest()


class HashAddress(
    namedtuple("HashAddress", ["id", "relpath", "abspath", "is_duplicate"])
):
    """File address containing file's content hash, its path relative to the
    store root, its full path inside the store's filesystem, and whether the
    content was already present when it was written.
    """

    def __new__(cls, id, relpath, abspath, is_duplicate=False):
        return super(HashAddress, cls).__new__(cls, id, relpath, abspath, is_duplicate)


class Stream(object):
    """Common interface for file-like objects.

    The input `obj` can be a readable binary object, ``bytes`` or a path to a
    file. If `obj` is a path to a file, then it will be opened until
    :meth:`close` is called. If `obj` is a file-like object, then its original
    position will be restored when :meth:`close` is called instead of closing
    the object. Closing of the stream is deferred to whatever process passed
    the stream in.

    Successive readings of the stream are supported without having to manually
    set its position back to ``0``.
    """

    def __init__(self, obj):
        if isinstance(obj, (bytes, bytearray, memoryview)):
            obj = io.BytesIO(obj)
            pos = 0
        elif hasattr(obj, "read"):
            pos = obj.tell()
        elif isinstance(obj, (str, os.PathLike)) and os.path.isfile(obj):
            obj = io.open(obj, "rb")
            pos = None
        else:
            raise InvalidFileError(obj)

        self._obj = obj
        self._pos = pos

    def __iter__(self):
        """Read underlying IO object and yield results. Return object to
        original position if we didn't open it originally.
        """
        self._obj.seek(0)

        while True:
            data = self._obj.read(CHUNK_SIZE)

            if not data:
                break

            if isinstance(data, str):
                data = data.encode("utf8")

            yield data

        self.rewind()

    def head(self, length=SNIFF_LEN) -> bytes:
        """Return up to `length` leading bytes of the stream."""
        self._obj.seek(0)
        data = self._obj.read(length)
        self.rewind()
        if isinstance(data, str):
            data = data.encode("utf8")
        return data

    def size(self) -> int:
        """Return the total size of the stream in bytes."""
        return sum(len(data) for data in self)

    def rewind(self):
        if self._pos is not None:
            self._obj.seek(self._pos)

    def close(self):
        """Close underlying IO object if we opened it, else return it to
        original position.
        """
        if self._pos is None:
            self._obj.close()
        else:
            self._obj.seek(self._pos)
