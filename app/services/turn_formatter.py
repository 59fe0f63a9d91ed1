from __future__ import annotations

from typing import Dict, List, Sequence

from app.models import Turn


def format_history_for_gemini(history: Sequence[Turn]) -> List[Dict[str, object]]:
	"""Convert stored turns to the ``history`` argument of ``start_chat``.

	Order is kept and nothing is dropped or trimmed, empty texts included.
	"""
	return [{"role": turn.role.value, "parts": [turn.text]} for turn in history]
