from dataclasses import dataclass, field
from datetime import timedelta

DEFAULT_REQUIRED_CODE = "3001"
DEFAULT_THRESHOLD_COUNT = 10
DEFAULT_GRACE_MINUTES = 15.0
# one week
MAX_GRACE_MINUTES = 7 * 24 * 60.0
DEFAULT_HIGH_RISK_CATEGORIES = (
    "Levels",
    "Grids",
    "Topography",
    "Scope Boxes",
    "Project Information",
    "Floors",
)


@dataclass(frozen=True)
class DeletePolicy:
    """Authorization constants for delete interception.

    Built once at process start (see ``securedelete.config.load_policy``) and
    never mutated afterwards.
    """

    required_code: str = DEFAULT_REQUIRED_CODE
    high_risk_categories: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_HIGH_RISK_CATEGORIES))
    threshold_count: int = DEFAULT_THRESHOLD_COUNT
    grace_duration: timedelta = timedelta(minutes=DEFAULT_GRACE_MINUTES)
    notify_dropped: bool = False

    def __post_init__(self):
        if not isinstance(self.required_code, str) or not self.required_code.strip():
            raise ValueError("required_code must be a non-empty string")
        if self.threshold_count < 1:
            raise ValueError(f"threshold_count must be at least 1, got {self.threshold_count}")
        if self.grace_duration < timedelta(0):
            raise ValueError(f"grace_duration must not be negative, got {self.grace_duration}")
        if self.grace_duration > timedelta(minutes=MAX_GRACE_MINUTES):
            raise ValueError(f"grace_duration must not exceed {MAX_GRACE_MINUTES:g} minutes, got {self.grace_duration}")
        # accept any iterable of names from callers
        object.__setattr__(self, "high_risk_categories", frozenset(self.high_risk_categories))

    @property
    def grace_minutes(self) -> float:
        return self.grace_duration.total_seconds() / 60.0
