from __future__ import annotations

from abc import ABC, abstractmethod

from .model import AttendanceRecord


class WorkedTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError

    def worked_hours(self, record: AttendanceRecord) -> float:
        return round(self.worked_minutes(record) / 60, 2)


class StandardWorkedTimeCalculator(WorkedTimeCalculator):
    """Standard rule: out - in, not below 0; open or empty records count 0."""

    def worked_minutes(self, record: AttendanceRecord) -> int:
        if record.clock_in is None or record.clock_out is None:
            return 0
        minutes = int((record.clock_out - record.clock_in).total_seconds() // 60)
        return max(minutes, 0)
