"""Tests for the streaming producer/consumer hand-off."""

import asyncio

import click
import pytest

from difx.config import Config
from difx.errors import DecodeError, TransportError
from difx.explainer import explain, stream_explanation
from difx.providers import Provider
from difx.render import Renderer


class ScriptedProvider(Provider):
    """Provider that replays chunks, optionally failing afterwards."""

    name = "Scripted"

    def __init__(self, chunks=(), error=None, text=""):
        super().__init__(Config())
        self.chunks = list(chunks)
        self.error = error
        self.text = text

    @property
    def model(self):
        return "scripted"

    def check_credentials(self):
        return []

    async def complete(self, prompt):
        if self.error:
            raise self.error
        return self.text

    async def stream(self, prompt):
        for chunk in self.chunks:
            await asyncio.sleep(0)
            yield chunk
        if self.error:
            raise self.error


def _run(provider):
    written = []
    renderer = Renderer(write=written.append)
    result = asyncio.run(stream_explanation(provider, "prompt", renderer))
    return result, "".join(written)


def test_chunks_rendered_in_order():
    provider = ScriptedProvider(["one ", "[ADD]two", "[/ADD] ", "three"])
    result, output = _run(provider)
    assert output == "one " + click.style("two", fg="green", bold=True) + " three\n"
    assert result == "one [ADD]two[/ADD] three"


def test_many_small_chunks():
    text = "[DEL]" + "x" * 200 + "[/DEL] done"
    result, output = _run(ScriptedProvider(list(text)))
    assert output == click.style("x" * 200, fg="red", bold=True) + " done\n"


def test_error_after_output_keeps_written_text():
    written = []
    renderer = Renderer(write=written.append)
    provider = ScriptedProvider(["partial answer"], error=TransportError("connection reset"))

    with pytest.raises(TransportError):
        asyncio.run(stream_explanation(provider, "prompt", renderer))
    assert "".join(written) == "partial answer\n"


def test_error_before_output_writes_nothing():
    written = []
    renderer = Renderer(write=written.append)
    provider = ScriptedProvider(["[ADD]never closed"], error=DecodeError("Malformed JSON", fragment="{"))

    with pytest.raises(DecodeError):
        asyncio.run(stream_explanation(provider, "prompt", renderer))
    assert written == []


def test_explain_returns_complete_text():
    assert asyncio.run(explain(ScriptedProvider(text="whole answer"), "prompt")) == "whole answer"
