# -*- coding: utf-8 -*-

import pytest

from hashbucket import machines


@pytest.mark.parametrize("addr", ["127.0.0.1", "deploy@127.0.0.1", "[::1]"])
def test_is_localhost_loopback(addr):
    assert machines.is_localhost(addr)


def test_is_localhost_interface_address(monkeypatch):
    monkeypatch.setattr(machines, "local_addresses", lambda: {machines._ip("10.1.2.3")})

    assert machines.is_localhost("10.1.2.3")
    assert not machines.is_localhost("192.0.2.10")


def test_split_host():
    assert machines.split_host("user@host") == "host"
    assert machines.split_host("[fe80::1]") == "fe80::1"
    assert machines.split_host("host") == "host"


@pytest.fixture
def fake_localhost(monkeypatch):
    monkeypatch.setattr(machines, "is_localhost", lambda addr: addr == "10.0.0.1")


def test_classify(fake_localhost):
    result = machines.classify(["10.0.0.1", "10.0.0.2", "10.0.0.3"], "deploy")

    assert result.local
    assert result.remote == ("deploy@10.0.0.2", "deploy@10.0.0.3")


def test_classify_without_local_machine(fake_localhost):
    result = machines.classify(["10.0.0.2"])

    assert not result.local
    assert result.remote == ("10.0.0.2",)


def test_classify_empty_is_local_only():
    assert machines.classify([]) == machines.Machines(True, ())
