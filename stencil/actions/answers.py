"""Run-scoped answer store.

Maps answer keys to typed values written by prompts.  Insertion order is the
order in which prompts executed; writing an existing key replaces its value
(last write wins) without moving it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from stencil.document.models import AnswerValue
from stencil.utils import format_value


class AnswerStore:
    """Mutable mapping from answer key to value, owned by one engine run."""

    def __init__(self, initial: Mapping[str, AnswerValue] | None = None) -> None:
        self._values: dict[str, AnswerValue] = dict(initial or {})

    def set(self, key: str, value: AnswerValue) -> None:
        self._values[key] = value

    def get(self, key: str) -> AnswerValue | None:
        return self._values.get(key)

    def text(self, key: str) -> str | None:
        """Return the value rendered for substitution, or ``None`` if unset."""
        if key not in self._values:
            return None
        return format_value(self._values[key])

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> dict[str, AnswerValue]:
        """Return a shallow copy of the stored answers."""
        return dict(self._values)

    def __repr__(self) -> str:
        return f"AnswerStore({self._values!r})"
