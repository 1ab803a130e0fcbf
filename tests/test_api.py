from __future__ import annotations

import pytest

from adbmux.api import Client, Config, KeywordSyntaxError, NoCandidatesError

from fakes import FakeBridge


def _client() -> Client:
    bridge = FakeBridge(
        serials=("emulator-5554", "R58M123ABC"),
        packages={"R58M123ABC": ["com.foo.bar", "com.baz", "org.Foo.tools"]},
    )
    return Client(config=Config(), bridge=bridge)


def test_public_client_list_devices() -> None:
    devices = _client().list_devices()
    assert [d.serial for d in devices] == ["emulator-5554", "R58M123ABC"]


def test_public_client_find_packages() -> None:
    client = _client()
    assert client.find_packages("R58M123ABC", "*foo*") == ["com.foo.bar", "org.Foo.tools"]
    assert client.find_packages("R58M123ABC", "COM.BAZ") == ["com.baz"]
    assert len(client.find_packages("R58M123ABC")) == 3


def test_public_client_unknown_device() -> None:
    with pytest.raises(NoCandidatesError):
        _client().find_packages("missing", "*foo*")


def test_public_client_rejects_single_wildcard() -> None:
    with pytest.raises(KeywordSyntaxError):
        _client().find_packages("R58M123ABC", "foo*")
