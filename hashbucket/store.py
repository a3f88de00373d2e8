# -*- coding: utf-8 -*-
"""Module for ContentStore class."""

import logging
import os
import posixpath
import subprocess
import uuid
from contextlib import closing, contextmanager
from tempfile import NamedTemporaryFile
from typing import Iterable, Optional, Tuple

import hashbucket.utils as u
from hashbucket.machines import classify

logger = logging.getLogger(__name__)

#: File name prefix of content being written, not yet at its hash path.
TMP_PREFIX = ".tmp-"


class ContentStore(object):
    """Write-once content addressable file store replicated to a fixed set of
    machines.

    Attributes:
        fs: fsspec filesystem holding the local copy of the files.
        root (str): Root path inside :attr:`fs`.
        depth (int): Number of single character directories the leading
            characters of a hash are sharded into.
        algorithm (str): Hash algorithm used to compute file hashes. Should be
            available in ``hashlib``. Defaults to ``'sha256'``.
        machines (Machines): Whether this host stores a copy and the remote
            destinations receiving one, resolved once at construction.
        remote_root (str): Root directory on remote machines. Defaults to
            :attr:`root` for local filesystems.
    """

    def __init__(
        self,
        root,
        depth: int = 0,
        algorithm: str = "sha256",
        machines: Iterable[str] = (),
        scp_user: str = "",
        remote_root: Optional[str] = None,
    ):
        self.fs, self.root = u.load_fs(root)
        self.depth = depth
        self.algorithm = algorithm
        self.machines = classify(tuple(machines), scp_user)

        if remote_root is None and u.is_local_fs(self.fs):
            remote_root = self.root
        if self.machines.remote and remote_root is None:
            raise ValueError("remote_root is required to replicate a non-local filesystem")
        self.remote_root = remote_root

    def put(self, content) -> u.HashAddress:
        """Hash `content` and save it. Returns the file's hash address."""
        with closing(u.Stream(content)) as stream:
            hashid = self.computehash(stream)
            return self.save_file(stream, hashid)

    def save_file(self, stream: u.Stream, hashid: str) -> u.HashAddress:
        """Persist `stream` under `hashid` on every configured machine.

        Raises:
            subprocess.CalledProcessError: If copying to a remote machine
                fails. Machines after the failing one are not copied to.
        """
        address = self.address(hashid)
        if self.machines.local:
            address = self.write(stream, hashid)
            if not self.machines.remote:
                return address
            if u.is_local_fs(self.fs):
                self.replicate(hashid, address.abspath)
                return address

        with tmpfile(stream) as source:
            self.replicate(hashid, source)
        return address

    def write(self, stream: u.Stream, hashid: str) -> u.HashAddress:
        """Write `stream` to the path of `hashid` unless it already exists.

        The content is written to a temporary file next to its destination
        and published only once complete, so readers of a hash path never see
        a partial file. Concurrent writers of the same hash race on
        publishing and the losers return the winner's address.
        """
        address = self.address(hashid)

        if self.fs.isfile(address.abspath):
            logger.debug("File %s already stored", hashid)
            return address._replace(is_duplicate=True)

        dirname = posixpath.dirname(address.abspath)
        self.fs.makedirs(dirname, exist_ok=True)
        tmp = posixpath.join(dirname, "%s%s" % (TMP_PREFIX, uuid.uuid4().hex))

        try:
            with self.fs.open(tmp, mode="wb") as dest:
                for data in stream:
                    dest.write(data)

            if not self._publish(tmp, address.abspath):
                logger.debug("File %s created by a concurrent writer", hashid)
                return address._replace(is_duplicate=True)
        finally:
            if self.fs.exists(tmp):
                self.fs.rm_file(tmp)

        logger.info("Stored file %s at %s", hashid, address.abspath)
        return address

    def _publish(self, tmp: str, path: str) -> bool:
        """Move the complete file `tmp` to `path` unless `path` exists.
        Returns whether `tmp` was published.
        """
        if u.is_local_fs(self.fs):
            try:
                os.link(tmp, path)
            except FileExistsError:
                return False
            return True

        # No exclusive rename outside the local disk. A lost race replaces
        # the file with identical complete content.
        if self.fs.exists(path):
            return False
        self.fs.mv(tmp, path)
        return True

    def replicate(self, hashid: str, source: Optional[str] = None) -> None:
        """Copy the local file `source` to the path of `hashid` on every
        remote machine, one machine at a time. `source` defaults to the
        locally stored file.
        """
        if not self.machines.remote:
            return
        if source is None:
            source = self.address(hashid).abspath

        relpath = self.file_path(hashid)
        dest_path = posixpath.join(self.remote_root, relpath)
        for machine in self.machines.remote:
            if self.depth:
                _run(["ssh", machine, "mkdir", "-p", posixpath.dirname(dest_path)])
            _run(["scp", source, "%s:%s" % (machine, dest_path)])
            logger.info("Replicated file %s to %s", hashid, machine)

    def open(self, hashid: str, mode: str = "rb"):
        """Return open file object of `hashid`.

        Raises:
            IOError: If file doesn't exist.
        """
        path = self.address(hashid).abspath
        if not self.fs.isfile(path):
            raise IOError("Could not locate file: {0}".format(hashid))
        return self.fs.open(path, mode)

    def read(self, hashid: str) -> bytes:
        with self.open(hashid) as fileobj:
            return fileobj.read()

    def exists(self, hashid: str) -> bool:
        """Check whether a given file id exists on disk."""
        return self.fs.isfile(self.address(hashid).abspath)

    def files(self) -> Iterable[str]:
        """Return the paths of all stored files under :attr:`root`."""
        if not self.fs.isdir(self.root):
            return []
        return [
            path
            for path in self.fs.find(self.root)
            if not posixpath.basename(path).startswith(TMP_PREFIX)
        ]

    def count(self) -> int:
        """Return count of the number of files under :attr:`root`."""
        return len(self.files())

    def size(self) -> int:
        """Return the total size in bytes of all files under :attr:`root`."""
        return sum(self.fs.size(path) for path in self.files())

    def repair(self) -> Iterable[Tuple[str, u.HashAddress]]:
        """Move any file whose location doesn't match its content hash under
        the current :attr:`depth`. Needed after changing the depth of an
        existing store.
        """
        repaired = []

        for path, address in list(self._corrupted()):
            if self.fs.isfile(address.abspath):
                # File already exists so just delete corrupted path.
                self.fs.rm_file(path)
            else:
                self.fs.makedirs(posixpath.dirname(address.abspath), exist_ok=True)
                self.fs.mv(path, address.abspath)

            repaired.append((path, address))

        return repaired

    def __contains__(self, hashid: str) -> bool:
        return self.exists(hashid)

    def __iter__(self):
        return iter(self.files())

    def __len__(self) -> int:
        return self.count()

    def computehash(self, stream: u.Stream) -> str:
        """Compute hash of file using :attr:`algorithm`."""
        return u.computehash(stream, self.algorithm)

    def file_path(self, hashid: str) -> str:
        """Return the path of `hashid` relative to :attr:`root`."""
        return u.file_path(hashid, self.depth)

    def address(self, hashid: str) -> u.HashAddress:
        relpath = self.file_path(hashid)
        return u.HashAddress(hashid, relpath, posixpath.join(self.root, relpath))

    def _corrupted(self) -> Iterable[Tuple[str, u.HashAddress]]:
        """Yield ``(path, address)`` for files stored at a path other than the
        expected one for their content.
        """
        for path in self.files():
            with self.fs.open(path, "rb") as fileobj:
                with closing(u.Stream(fileobj)) as stream:
                    hashid = self.computehash(stream)

            address = self.address(hashid)
            if posixpath.normpath(address.abspath) != posixpath.normpath(path):
                yield (path, address)


@contextmanager
def tmpfile(stream):
    """Context manager that writes a :class:`~hashbucket.utils.Stream` to a
    named temporary file and yields its file name. Cleanup deletes the
    temporary file from disk.
    """
    tmp = NamedTemporaryFile(prefix="fs_", delete=False)
    try:
        with tmp:
            for data in stream:
                tmp.write(data)

        yield tmp.name
    finally:
        os.remove(tmp.name)


def _run(cmd):
    logger.debug("Running %s", cmd)
    subprocess.run(cmd, check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
