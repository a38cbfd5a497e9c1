from dataclasses import dataclass
from datetime import datetime, timedelta

from camerpulse.generation.interfaces.poll_store import PollStore


@dataclass(frozen=True)
class QuotaDecision:
    count: int
    limit: int
    window_start: datetime

    @property
    def allowed(self) -> bool:
        return self.count < self.limit


class QuotaGuard:
    """
    Counts generations in the trailing window on every call. Two runs that
    check at the same moment can both pass; transactional write mode
    re-checks under a lock.
    """

    def __init__(self, store: PollStore, window_days: int = 7):
        self.store = store
        self.window = timedelta(days=window_days)

    def window_start(self, now: datetime) -> datetime:
        return now - self.window

    def check(self, now: datetime, limit: int) -> QuotaDecision:
        start = self.window_start(now)
        return QuotaDecision(count=self.store.count_audits_since(start), limit=limit, window_start=start)
