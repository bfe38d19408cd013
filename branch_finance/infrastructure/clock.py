"""System clock adapter."""

from datetime import date, datetime, timezone

from branch_finance.application.ports.directories import TimeSourcePort


class SystemTimeSource(TimeSourcePort):
    """Time source backed by the system clock, in naive UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


__all__ = ["SystemTimeSource"]
