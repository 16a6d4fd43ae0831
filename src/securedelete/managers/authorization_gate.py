import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from .policy import DeletePolicy

logger = logging.getLogger(__name__)

# Start of the grace window before any successful authorization.
EXPIRED = datetime.min.replace(tzinfo=timezone.utc)


class AuthorizationResult(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class AuthorizationState:
    """Grace-window state shared by every delete attempt in a session.

    Create one per process and hand it to each AuthorizationGate that should
    share it. ``lock`` guards both reads and extensions of
    ``grace_expires_at``.
    """

    grace_expires_at: datetime = EXPIRED
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class AuthorizationGate:
    """Checks authorization codes and tracks the grace window."""

    def __init__(self, policy: DeletePolicy | None = None, state: AuthorizationState | None = None):
        self.policy = policy if policy is not None else DeletePolicy()
        self.state = state if state is not None else AuthorizationState()

    def grace_active(self, now: datetime) -> bool:
        with self.state.lock:
            return now <= self.state.grace_expires_at

    def grace_remaining(self, now: datetime) -> timedelta:
        """Return how long the grace window stays open (zero once expired)."""
        with self.state.lock:
            remaining = self.state.grace_expires_at - now
        return max(remaining, timedelta(0))

    def needs_code(self, requires_authorization: bool, now: datetime) -> bool:
        """Return True if the attempt at ``now`` must be authorized with a code.

        An active grace window suppresses the prompt even for risky
        selections; otherwise the classifier result is returned unchanged.
        """
        if self.grace_active(now):
            if requires_authorization:
                logger.debug("Grace window active; skipping code prompt")
            return False
        return requires_authorization

    def validate_and_extend(self, submitted_code: str | None, now: datetime) -> AuthorizationResult:
        """Compare ``submitted_code`` with the required code.

        Surrounding whitespace is ignored and the comparison is
        case-sensitive. On a match the grace window is extended to
        ``now + grace_duration``; on a mismatch state is left untouched.
        """
        code = submitted_code.strip() if submitted_code else ""
        with self.state.lock:
            if not code or code != self.policy.required_code:
                logger.warning("Authorization code rejected")
                return AuthorizationResult.REJECTED
            expires = now + self.policy.grace_duration
            # concurrent attempts may validate out of order; never shorten the window
            if expires > self.state.grace_expires_at:
                self.state.grace_expires_at = expires
            logger.info(f"Authorization accepted; grace window open until {self.state.grace_expires_at.isoformat()}")
        return AuthorizationResult.APPROVED
