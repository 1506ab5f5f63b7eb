"""Tests for the streaming completion client and chunk application."""

import pytest

from edtech.schemas.chat import Message
from edtech.services.completion import CompletionStream, apply_chunks
from edtech.services.errors import SetupRequiredError


class FakeMessageStream:
    def __init__(self, chunks: list[str]):
        self.chunks = chunks

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    @property
    def text_stream(self):
        async def gen():
            for chunk in self.chunks:
                yield chunk

        return gen()


class FakeMessages:
    def __init__(self, chunks: list[str]):
        self.chunks = chunks
        self.requests: list[dict] = []

    def stream(self, **request):
        self.requests.append(request)
        return FakeMessageStream(self.chunks)


class FakeClient:
    def __init__(self, chunks: list[str]):
        self.api_key = None
        self.messages = FakeMessages(chunks)


def make_stream(chunks: list[str]) -> tuple[CompletionStream, FakeClient]:
    client = FakeClient(chunks)

    def factory(api_key: str) -> FakeClient:
        client.api_key = api_key
        return client

    return CompletionStream(model="test-model", max_tokens=100, client_factory=factory), client


async def collect(stream) -> list:
    return [item async for item in stream]


async def test_stream_yields_chunks_in_order():
    stream, client = make_stream(["Photo", "synthesis", " is"])
    history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "Hello!"}]

    chunks = await collect(stream.stream("key-123", "Define it", "Be precise.", history))

    assert chunks == ["Photo", "synthesis", " is"]
    assert client.api_key == "key-123"
    request = client.messages.requests[0]
    assert request["model"] == "test-model"
    assert request["system"] == "Be precise."
    assert request["messages"] == history + [{"role": "user", "content": "Define it"}]
    assert "thinking" not in request


async def test_thinking_budget_passed_through():
    stream, client = make_stream(["ok"])
    stream.thinking_budget = 1024

    await collect(stream.stream("key", "Think hard", "Base.", [], thinking=True))

    assert client.messages.requests[0]["thinking"] == {"type": "enabled", "budget_tokens": 1024}


async def test_missing_key_fails_before_any_request():
    stream, client = make_stream(["never"])

    with pytest.raises(SetupRequiredError):
        await collect(stream.stream(None, "Hello", "Base.", []))
    assert client.messages.requests == []


async def chunk_source(chunks: list[str]):
    for chunk in chunks:
        yield chunk


async def test_apply_chunks_replaces_text():
    message = Message(role="assistant")

    snapshots = await collect(apply_chunks(message, chunk_source(["Hello", " world"])))

    assert [s.text for s in snapshots] == ["Hello", "Hello world"]
    assert all(s.id == message.id for s in snapshots)
    assert message.text == "Hello world"


async def test_apply_chunks_same_result_twice():
    """Applying the same chunk sequence to fresh placeholders gives the same text."""
    chunks = ["# Title", "\n\n", "- point one", "\n- point two"]

    first = await collect(apply_chunks(Message(role="assistant"), chunk_source(chunks)))
    second = await collect(apply_chunks(Message(role="assistant"), chunk_source(chunks)))

    assert first[-1].text == second[-1].text == "".join(chunks)


async def test_snapshots_are_independent_copies():
    message = Message(role="assistant")
    snapshots = await collect(apply_chunks(message, chunk_source(["a", "b"])))
    assert snapshots[0].text == "a"
    assert snapshots[0] is not message
