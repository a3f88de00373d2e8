# -*- coding: utf-8 -*-
"""Classification of replica machines into the local one and remote ones."""

import ipaddress
import logging
import socket
from collections import namedtuple

import psutil

logger = logging.getLogger(__name__)


class Machines(namedtuple("Machines", ["local", "remote"])):
    """Replica machines of a bucket.

    Attributes:
        local (bool): Whether this host is one of the configured machines.
        remote (tuple): ``[user@]addr`` destinations of the other machines.
    """


def split_host(addr):
    """Return the bare host of ``[user@]host`` or ``[user@][ipv6]``."""
    host = addr.rsplit("@", 1)[-1]
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host


def resolve(host):
    """Return the set of IP addresses `host` resolves to."""
    return {
        _ip(info[4][0]) for info in socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    }


def local_addresses():
    """Return the set of IP addresses assigned to this host's interfaces."""
    addresses = set()
    for snics in psutil.net_if_addrs().values():
        for snic in snics:
            if snic.family in (socket.AF_INET, socket.AF_INET6):
                addresses.add(_ip(snic.address))
    return addresses


def is_localhost(addr):
    """Check whether `addr` denotes the current host.

    Raises:
        socket.gaierror: If the address cannot be resolved.
    """
    resolved = resolve(split_host(addr))
    if any(ip.is_loopback for ip in resolved):
        return True
    return bool(resolved & local_addresses())


def classify(machines, user=""):
    """Split `machines` into a :class:`Machines` value.

    An empty machine list is treated as local only storage.
    """
    if not machines:
        return Machines(True, ())

    prefix = user + "@" if user else ""
    local = False
    remote = []
    for addr in machines:
        if is_localhost(addr):
            local = True
        else:
            remote.append(prefix + addr)

    logger.debug("Classified machines %s: local=%s remote=%s", machines, local, remote)
    return Machines(local, tuple(remote))


def _ip(address):
    # Link-local IPv6 addresses carry a ``%scope`` suffix.
    return ipaddress.ip_address(address.split("%", 1)[0])
