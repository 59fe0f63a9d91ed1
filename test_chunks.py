from types import SimpleNamespace

import pytest

from app.services.chunks import ChunkShape, NestedCandidatePath, TextField, TextFn, accumulate_reply, resolve_chunk


async def _stream(items):
	for item in items:
		yield item


class _RaisingText:
	"""Mimics SDK responses whose ``text`` property raises when no part is present."""

	def __init__(self, candidates):
		self.candidates = candidates

	@property
	def text(self):
		raise ValueError("response has no text part")


def _candidate(*texts):
	parts = [SimpleNamespace(text=t) for t in texts]
	return [SimpleNamespace(content=SimpleNamespace(parts=parts))]


def test_resolve_chunk_shapes():
	assert isinstance(resolve_chunk(SimpleNamespace(text=lambda: "hi")), TextFn)
	assert isinstance(resolve_chunk(SimpleNamespace(text="hi")), TextField)
	assert isinstance(resolve_chunk({"text": "hi"}), TextField)
	assert isinstance(resolve_chunk(SimpleNamespace(candidates=_candidate("hi"))), NestedCandidatePath)
	assert isinstance(resolve_chunk(_RaisingText(_candidate("hi"))), NestedCandidatePath)


def test_resolve_chunk_rejects_unknown_shapes():
	assert resolve_chunk(None) is None
	assert resolve_chunk(object()) is None
	assert resolve_chunk(SimpleNamespace(text=42)) is None
	assert resolve_chunk(SimpleNamespace(candidates=[])) is None
	assert resolve_chunk(_RaisingText([])) is None


def test_nested_candidate_path_joins_parts():
	chunk = {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"inline_data": b""}, {"text": "there"}]}}]}
	assert resolve_chunk(chunk).extract() == "Hello there"


@pytest.mark.anyio
async def test_accumulate_mixed_chunks_in_order():
	chunks = [
		SimpleNamespace(text=lambda: "Tell "),
		SimpleNamespace(text="me "),
		object(),
		SimpleNamespace(candidates=_candidate("about ", "yourself.")),
		SimpleNamespace(text=lambda: ""),
	]
	assert await accumulate_reply(_stream(chunks)) == "Tell me about yourself."


@pytest.mark.anyio
async def test_accumulate_all_unrecognised_is_empty(caplog):
	with caplog.at_level("WARNING"):
		reply = await accumulate_reply(_stream([object(), 7]))
	assert reply == ""
	assert "no extractable text" in caplog.text


@pytest.mark.anyio
async def test_accumulate_empty_stream():
	assert await accumulate_reply(_stream([])) == ""


def test_chunk_shape_requires_extract():
	class Incomplete(ChunkShape):
		__slots__ = ()

	with pytest.raises(TypeError):
		Incomplete(object())
