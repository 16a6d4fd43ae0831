from typing import TYPE_CHECKING, Sequence

from .policy import DeletePolicy

if TYPE_CHECKING:
    from .delete_manager import SelectionItem


class RiskClassifier:
    """Decides whether a resolved selection needs an authorization code.

    A selection is risky when any item belongs to a high-risk category
    (compared case-insensitively) or when the selection is at least
    ``threshold_count`` items long.
    """

    def __init__(self, policy: DeletePolicy | None = None):
        self.policy = policy if policy is not None else DeletePolicy()
        self._high_risk = {c.casefold() for c in self.policy.high_risk_categories}

    def is_high_risk_category(self, category: str | None) -> bool:
        return category is not None and category.casefold() in self._high_risk

    def high_risk_items(self, items: "Sequence[SelectionItem]") -> "list[SelectionItem]":
        """Return the items whose category alone forces authorization."""
        return [item for item in items if self.is_high_risk_category(item.category)]

    def classify(self, items: "Sequence[SelectionItem]") -> bool:
        """Return True if deleting ``items`` requires an authorization code."""
        if not items:
            return False
        if len(items) >= self.policy.threshold_count:
            return True
        return any(self.is_high_risk_category(item.category) for item in items)
