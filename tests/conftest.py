"""Shared fixtures for nntpclient tests."""

import typing

import pytest

from nntpclient import NNTPClient, Transport


class FakeTransport(Transport):
    """Replays scripted server chunks and records what the client sends."""

    def __init__(self, chunks: typing.Iterable[bytes]) -> None:
        self.chunks: typing.List[bytes] = list(chunks)
        self.sent: typing.List[bytes] = []
        self.closed: bool = False

    def send(self, data: bytes) -> None:
        self.sent.append(data)

    def recv(self) -> bytes:
        if self.chunks:
            return self.chunks.pop(0)
        return b""

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_client():
    """Return a factory building a client wired to a FakeTransport."""

    def factory(
        *chunks: bytes, **options: typing.Any
    ) -> typing.Tuple[NNTPClient, FakeTransport]:
        transport = FakeTransport(chunks)
        client = NNTPClient(transport_factory=lambda host, port: transport, **options)
        return client, transport

    return factory


@pytest.fixture
def connected(make_client):
    """Return a factory for a client that already read a 200 greeting."""

    def factory(
        *chunks: bytes, **options: typing.Any
    ) -> typing.Tuple[NNTPClient, FakeTransport]:
        client, transport = make_client(
            b"200 news.example.com ready\r\n", *chunks, **options
        )
        client.connect()
        return client, transport

    return factory
