"""In-memory host used by tests and by the CLI's file-driven delete."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Hashable, Sequence

from .base import BaseHost, ResolvedElement


class InMemoryHost(BaseHost):
    """Deterministic host whose elements live in a dict.

    Identities mapped to None behave like dangling handles. Everything the
    delete flow asks of the host is recorded for inspection.
    ``on_message``, when given, is also called with each notice as it is shown.
    """

    def __init__(
        self,
        elements: dict[Hashable, ResolvedElement | None] | None = None,
        selection: Sequence[Hashable] | None = None,
        name: str = "In-Memory Host",
        on_message: Callable[[str], Any] | None = None,
    ):
        self.elements: dict[Hashable, ResolvedElement | None] = dict(elements or {})
        self.selection: list[Hashable] = list(selection) if selection is not None else list(self.elements)
        self._name = name
        self.restricted_to: list[Hashable] | None = None
        self.cancelled = False
        self.messages: list[str] = []
        self.on_message = on_message

    def get_name(self) -> str:
        return self._name

    def get_current_selection(self) -> list[Hashable]:
        return list(self.selection)

    def resolve(self, identity: Hashable) -> ResolvedElement | None:
        return self.elements.get(identity)

    def restrict_pending_delete_to(self, identities: Sequence[Hashable]) -> None:
        original = set(self.selection)
        self.restricted_to = [i for i in identities if i in original]

    def cancel_pending_delete(self) -> None:
        self.cancelled = True

    def show_message(self, text: str) -> None:
        self.messages.append(text)
        if self.on_message is not None:
            self.on_message(text)

    @property
    def proceeded(self) -> bool:
        """True if the pending delete was narrowed and not cancelled."""
        return self.restricted_to is not None and not self.cancelled

    @classmethod
    def from_records(cls, records: list[dict[str, Any]], name: str = "In-Memory Host") -> InMemoryHost:
        """Build a host from ``{"id", "category", "name", "missing"}`` records.

        Records with ``missing`` set stay in the selection but do not resolve.
        """
        elements: dict[Hashable, ResolvedElement | None] = {}
        selection: list[Hashable] = []
        for rec in records:
            if not isinstance(rec, dict) or 'id' not in rec:
                raise ValueError(f"Selection record must be an object with an 'id': {rec!r}")
            identity = rec['id']
            if isinstance(identity, list):
                identity = tuple(identity)
            selection.append(identity)
            if rec.get('missing'):
                elements[identity] = None
            else:
                elements[identity] = ResolvedElement(category=rec.get('category'), name=rec.get('name'))
        return cls(elements=elements, selection=selection, name=name)


def load_selection_file(path: Path) -> InMemoryHost:
    """Load a JSON selection file into an InMemoryHost.

    The file holds either a list of records or an object with a
    ``selection`` list. Raises ValueError on malformed content and OSError
    when the file cannot be read.
    """
    with Path(path).open('r', encoding='utf8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get('selection')
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of selection records")
    return InMemoryHost.from_records(data, name=Path(path).name)
