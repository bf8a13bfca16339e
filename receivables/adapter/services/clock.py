from datetime import datetime
from receivables.app.services.clock import Clock


class SystemClock(Clock):
    """Wall clock in naive UTC, matching the timestamps stored by the entities"""

    def now(self) -> datetime:
        return datetime.utcnow()
