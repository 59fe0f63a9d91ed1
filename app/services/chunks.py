"""Text extraction for streamed completion chunks.

Chunks arrive in one of three shapes:

- ``TextFn``: the chunk exposes ``text()`` as a zero-argument callable.
- ``TextField``: the chunk carries ``text`` as a plain string.
- ``NestedCandidatePath``: the text sits under
  ``candidates[0].content.parts[*].text``.

``resolve_chunk`` picks the shape once per chunk; anything else is logged and
contributes nothing to the reply.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, List, Optional


logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
	if isinstance(obj, dict):
		return obj.get(name)
	try:
		return getattr(obj, name, None)
	except Exception:
		# SDK properties may raise when the chunk carries no text part
		return None


class ChunkShape(ABC):
	__slots__ = ("chunk",)

	def __init__(self, chunk: Any) -> None:
		self.chunk = chunk

	@abstractmethod
	def extract(self) -> str:
		...


class TextFn(ChunkShape):
	__slots__ = ()

	def extract(self) -> str:
		value = _field(self.chunk, "text")()
		return value if isinstance(value, str) else ""


class TextField(ChunkShape):
	__slots__ = ()

	def extract(self) -> str:
		return _field(self.chunk, "text")


class NestedCandidatePath(ChunkShape):
	__slots__ = ()

	def extract(self) -> str:
		candidates = _field(self.chunk, "candidates")
		content = _field(candidates[0], "content")
		parts = _field(content, "parts") or []
		pieces: List[str] = []
		for part in parts:
			text = _field(part, "text")
			if isinstance(text, str):
				pieces.append(text)
		return "".join(pieces)


def _has_candidate_parts(chunk: Any) -> bool:
	candidates = _field(chunk, "candidates")
	if not candidates:
		return False
	try:
		first = candidates[0]
	except (IndexError, KeyError, TypeError):
		return False
	parts = _field(_field(first, "content"), "parts")
	return bool(parts)


def resolve_chunk(chunk: Any) -> Optional[ChunkShape]:
	if chunk is None:
		return None
	text = _field(chunk, "text")
	if callable(text):
		return TextFn(chunk)
	if isinstance(text, str):
		return TextField(chunk)
	if _has_candidate_parts(chunk):
		return NestedCandidatePath(chunk)
	return None


async def accumulate_reply(chunks: AsyncIterator[Any]) -> str:
	"""Join the text of every recognised chunk; unrecognised chunks add nothing.

	When no chunk is recognised the reply is ``""``, not an error.
	"""
	parts: List[str] = []
	skipped = 0
	async for chunk in chunks:
		shape = resolve_chunk(chunk)
		if shape is None:
			skipped += 1
			logger.warning("Skipping stream chunk with no extractable text: %r", type(chunk).__name__)
			continue
		parts.append(shape.extract())
	if skipped and not parts:
		logger.warning("No stream chunk carried text (%d skipped); reply is empty", skipped)
	return "".join(parts)
