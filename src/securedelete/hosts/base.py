"""Base host interface for Secure Delete.

A host is the application whose delete command is being intercepted. All
host adapters should inherit from BaseHost so the delete flow can drive them
the same way.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Hashable, List, Optional, Sequence


@dataclass(frozen=True)
class ResolvedElement:
    """Category and name the host reports for one selected identity."""

    category: Optional[str]
    name: Optional[str]


class BaseHost(ABC):
    """Abstract base class for host application adapters."""

    def get_name(self) -> str:
        """Return the display name of this host.

        Default implementation returns the class name.
        """
        return self.__class__.__name__

    @abstractmethod
    def get_current_selection(self) -> List[Hashable]:
        """Return the identities selected when the delete was triggered.

        The list may be empty. Identities are opaque to the delete flow and
        are only ever handed back to this host.
        """
        pass

    @abstractmethod
    def resolve(self, identity: Hashable) -> Optional[ResolvedElement]:
        """Resolve an identity to its category and name.

        Returns:
            A ResolvedElement, or None if the identity no longer refers to
            anything (it will be dropped from the attempt).
        """
        pass

    @abstractmethod
    def restrict_pending_delete_to(self, identities: Sequence[Hashable]) -> None:
        """Narrow the pending delete to ``identities`` and let it proceed.

        Identities that were not part of the original selection must be
        ignored.
        """
        pass

    @abstractmethod
    def cancel_pending_delete(self) -> None:
        """Abort the pending delete entirely."""
        pass

    @abstractmethod
    def show_message(self, text: str) -> Any:
        """Show a non-blocking notice to the user."""
        pass
