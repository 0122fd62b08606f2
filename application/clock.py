from datetime import date, datetime


class Clock:
    """Wall-clock access, injected so time-dependent logic can be pinned in tests."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return date.today()
