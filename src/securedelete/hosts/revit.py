"""Revit host adapter.

Wraps a Revit ``UIDocument`` and the ``BeforeExecutedEventArgs`` of the
intercepted Delete command. The Revit API objects are only used through
attribute access, so this module does not import the Revit assemblies
itself; callers running inside Revit (e.g. under pyRevit) pass in the
pieces that need them:

- ``notifier``: usually ``TaskDialog.Show``; called as ``notifier(title, text)``.
- ``id_collection``: turns a list of ElementIds into what
  ``Selection.SetElementIds`` accepts, e.g. ``lambda ids: List[ElementId](ids)``.
- ``ui_document_factory``: usually ``UIDocument``; builds a UI document
  from ``args.ActiveDocument``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Sequence

from ..review.base import DIALOG_TITLE, BaseReviewer
from .base import BaseHost, ResolvedElement

logger = logging.getLogger(__name__)


def _element_id_value(element_id: Any) -> Any:
    # Revit 2024+ exposes Value; older releases only IntegerValue
    value = getattr(element_id, 'Value', None)
    if value is None:
        value = getattr(element_id, 'IntegerValue', element_id)
    return value


class RevitHost(BaseHost):
    """Host adapter for one intercepted Revit Delete command."""

    def __init__(
        self,
        ui_document: Any,
        event_args: Any,
        notifier: Callable[[str, str], Any],
        id_collection: Callable[[list[Any]], Any] = list,
    ):
        self.ui_document = ui_document
        self.event_args = event_args
        self.notifier = notifier
        self.id_collection = id_collection
        self._original: list[Any] | None = None

    def get_name(self) -> str:
        return "Revit"

    def get_current_selection(self) -> list[Hashable]:
        ids = self.ui_document.Selection.GetElementIds()
        self._original = list(ids) if ids is not None else []
        return list(self._original)

    def resolve(self, identity: Hashable) -> ResolvedElement | None:
        element = self.ui_document.Document.GetElement(identity)
        if element is None:
            return None
        category = getattr(element, 'Category', None)
        category_name = getattr(category, 'Name', None) if category is not None else None
        name = getattr(element, 'Name', None)
        if not name or not str(name).strip():
            name = f"Id {_element_id_value(element.Id)}"
        return ResolvedElement(category=category_name, name=name)

    def restrict_pending_delete_to(self, identities: Sequence[Hashable]) -> None:
        original = self._original if self._original is not None else self.get_current_selection()
        allowed = [i for i in identities if i in original]
        self.ui_document.Selection.SetElementIds(self.id_collection(allowed))
        logger.debug(f"Restricted Revit selection to {len(allowed)} elements")

    def cancel_pending_delete(self) -> None:
        self.event_args.Cancel = True

    def show_message(self, text: str) -> Any:
        return self.notifier(DIALOG_TITLE, text)


class RevitDeleteInterceptor:
    """Handler for the ``BeforeExecuted`` event of Revit's Delete command.

    Hook ``interceptor.on_before_delete`` to the add-in command binding; each
    invocation runs one attempt through ``manager``.
    """

    def __init__(
        self,
        manager: Any,
        reviewer: BaseReviewer,
        notifier: Callable[[str, str], Any],
        ui_document_factory: Callable[[Any], Any],
        id_collection: Callable[[list[Any]], Any] = list,
    ):
        self.manager = manager
        self.reviewer = reviewer
        self.notifier = notifier
        self.ui_document_factory = ui_document_factory
        self.id_collection = id_collection

    def on_before_delete(self, sender: Any, event_args: Any):
        doc = getattr(event_args, 'ActiveDocument', None)
        if doc is None:
            event_args.Cancel = True
            return None
        host = RevitHost(
            self.ui_document_factory(doc),
            event_args,
            notifier=self.notifier,
            id_collection=self.id_collection,
        )
        return self.manager.handle_delete(host, self.reviewer)
