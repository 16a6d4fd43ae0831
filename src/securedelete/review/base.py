"""Base reviewer interface.

A reviewer shows the resolved selection as a checklist (every item checked by
default), optionally asks for the authorization code, and reports whether the
user confirmed.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Hashable, Optional, Sequence

if TYPE_CHECKING:
    from ..managers.delete_manager import SelectionItem

DIALOG_TITLE = "Secure Delete"
REVIEW_PROMPT = "Review elements to delete. Uncheck any you don't want to delete."


@dataclass(frozen=True)
class ReviewResult:
    """What the user decided in the review step.

    When ``confirmed`` is False the other fields are meaningless.
    """

    confirmed: bool
    checked_identities: FrozenSet[Hashable] = field(default_factory=frozenset)
    submitted_code: Optional[str] = None

    @classmethod
    def cancelled(cls) -> "ReviewResult":
        return cls(confirmed=False)


class BaseReviewer(ABC):
    """Abstract base class for review/confirmation front ends."""

    @abstractmethod
    def present_review(self, items: "Sequence[SelectionItem]", prompt_for_code: bool) -> ReviewResult:
        """Present ``items`` for review and block until the user responds.

        Args:
            items: Resolved items, shown checked by default.
            prompt_for_code: Whether to collect a masked authorization code.

        Returns:
            A ReviewResult with the identities still checked and the code
            entered (None if no code was asked for).
        """
        pass
