import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Hashable

from ..hosts.base import BaseHost
from ..review.base import BaseReviewer
from .authorization_gate import AuthorizationGate, AuthorizationResult, AuthorizationState
from .policy import DeletePolicy
from .risk_classifier import RiskClassifier

logger = logging.getLogger(__name__)

NO_CATEGORY = "<No Category>"

MSG_NOTHING_SELECTED = "Nothing selected."
MSG_CODE_REJECTED = "Incorrect code. Deletion blocked."
MSG_EMPTY_FINAL = "No elements selected for deletion."
MSG_DROPPED = "{count} element(s) could no longer be found and were skipped."


class DeleteOutcome(Enum):
    APPROVED = "approved"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


class BlockReason(Enum):
    EMPTY_SELECTION = "empty_selection"
    USER_CANCELLED = "user_cancelled"
    CODE_REJECTED = "code_rejected"
    EMPTY_FINAL_SELECTION = "empty_final_selection"


@dataclass(frozen=True)
class SelectionItem:
    identity: Hashable
    category: str
    display_label: str

    def __str__(self) -> str:
        return self.display_label


@dataclass
class DeleteAttemptResult:
    outcome: DeleteOutcome
    reason: BlockReason | None = None
    approved: list[Any] = field(default_factory=list)
    message: str | None = None
    prompted_for_code: bool = False
    dropped_count: int = 0

    @property
    def proceeded(self) -> bool:
        return self.outcome is DeleteOutcome.APPROVED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_selection_item(identity: Hashable, category: str | None, name: str | None) -> SelectionItem:
    """Build a SelectionItem, filling in a category and name when the host has none."""
    cat = category if category else NO_CATEGORY
    label_name = name if name and name.strip() else f"Id {identity}"
    return SelectionItem(identity=identity, category=cat, display_label=f"{cat} - {label_name}")


class SecureDeleteManager:
    """Runs one delete attempt through classification, review and authorization.

    The manager owns no host or UI state; every attempt gets the host and
    reviewer it should talk to. The only state kept between attempts is the
    grace window inside the AuthorizationGate.
    """

    def __init__(
        self,
        policy: DeletePolicy | None = None,
        state: AuthorizationState | None = None,
        classifier: RiskClassifier | None = None,
        gate: AuthorizationGate | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the SecureDeleteManager.

        Args:
            policy: Authorization constants (uses defaults if None).
            state: Shared grace-window state (creates a fresh one if None).
            classifier: Risk classifier (built from ``policy`` if None).
            gate: Authorization gate (built from ``policy`` and ``state`` if None).
            clock: Returns the current aware datetime (UTC now if None).
        """
        self.policy = policy or DeletePolicy()
        self.classifier = classifier or RiskClassifier(self.policy)
        self.gate = gate or AuthorizationGate(self.policy, state or AuthorizationState())
        self.clock = clock or _utcnow

    def resolve_selection(self, host: BaseHost, identities: list[Hashable]) -> tuple[list[SelectionItem], int]:
        """Resolve identities through the host, dropping any that are gone.

        Returns:
            The resolved items in selection order and the number dropped.
        """
        items: list[SelectionItem] = []
        dropped = 0
        for identity in identities:
            try:
                resolved = host.resolve(identity)
            except Exception as e:
                logger.warning(f"Host '{host.get_name()}' failed to resolve {identity!r}: {e}")
                resolved = None
            if resolved is None:
                logger.debug(f"Dropping unresolvable identity {identity!r}")
                dropped += 1
                continue
            items.append(make_selection_item(identity, resolved.category, resolved.name))
        return items, dropped

    def requires_code(self, items: list[SelectionItem]) -> bool:
        """Return True if an attempt on ``items`` right now would prompt for a code."""
        return self.gate.needs_code(self.classifier.classify(items), self.clock())

    def handle_delete(self, host: BaseHost, reviewer: BaseReviewer) -> DeleteAttemptResult:
        """Decide a single delete attempt and tell the host what to do.

        Every non-approved outcome cancels the host's pending delete. If a
        collaborator raises, the pending delete is cancelled before the
        error propagates.
        """
        identities = list(host.get_current_selection() or [])
        if not identities:
            logger.warning(f"Delete blocked on '{host.get_name()}': nothing selected")
            return self._block(host, BlockReason.EMPTY_SELECTION, MSG_NOTHING_SELECTED)

        try:
            return self._review_and_apply(host, reviewer, identities)
        except Exception:
            logger.error(f"Delete attempt on '{host.get_name()}' failed; cancelling")
            host.cancel_pending_delete()
            raise

    def _review_and_apply(self, host: BaseHost, reviewer: BaseReviewer, identities: list[Hashable]) -> DeleteAttemptResult:
        items, dropped = self.resolve_selection(host, identities)
        if dropped and self.policy.notify_dropped:
            host.show_message(MSG_DROPPED.format(count=dropped))

        risky = self.classifier.classify(items)
        prompt_for_code = self.gate.needs_code(risky, self.clock())
        logger.info(
            f"Delete attempt on '{host.get_name()}': {len(items)} items "
            f"({dropped} dropped), high risk={risky}, code required={prompt_for_code}"
        )

        review = reviewer.present_review(items, prompt_for_code)
        if not review.confirmed:
            logger.info("Delete cancelled by user")
            host.cancel_pending_delete()
            return DeleteAttemptResult(
                outcome=DeleteOutcome.CANCELLED,
                reason=BlockReason.USER_CANCELLED,
                prompted_for_code=prompt_for_code,
                dropped_count=dropped,
            )

        if prompt_for_code:
            verdict = self.gate.validate_and_extend(review.submitted_code, self.clock())
            if verdict is AuthorizationResult.REJECTED:
                return self._block(host, BlockReason.CODE_REJECTED, MSG_CODE_REJECTED, prompt_for_code, dropped)

        checked = set(review.checked_identities)
        approved = [item.identity for item in items if item.identity in checked]
        if not approved:
            return self._block(host, BlockReason.EMPTY_FINAL_SELECTION, MSG_EMPTY_FINAL, prompt_for_code, dropped)

        host.restrict_pending_delete_to(approved)
        logger.info(f"Delete approved for {len(approved)} of {len(items)} items")
        return DeleteAttemptResult(
            outcome=DeleteOutcome.APPROVED,
            approved=approved,
            prompted_for_code=prompt_for_code,
            dropped_count=dropped,
        )

    def _block(
        self,
        host: BaseHost,
        reason: BlockReason,
        message: str,
        prompted_for_code: bool = False,
        dropped: int = 0,
    ) -> DeleteAttemptResult:
        if reason is not BlockReason.EMPTY_SELECTION:
            logger.warning(f"Delete blocked: {reason.value}")
        host.show_message(message)
        host.cancel_pending_delete()
        return DeleteAttemptResult(
            outcome=DeleteOutcome.BLOCKED,
            reason=reason,
            message=message,
            prompted_for_code=prompted_for_code,
            dropped_count=dropped,
        )
