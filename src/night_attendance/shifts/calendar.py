from __future__ import annotations

from datetime import date, datetime, timedelta

from .model import ShiftSettings


class ShiftCalendar:
    """Maps instants to the shift-date that owns them.

    A shift opening at `window_start` on day D and closing at `window_end` on
    D+1 is keyed by D in its entirety. Instants in the daytime gap (strictly
    between `window_end` and `window_start`) map to the shift opening later
    that same local day.
    """

    def __init__(self, settings: ShiftSettings):
        self._settings = settings

    def to_local(self, t: datetime) -> datetime:
        if t.tzinfo is None:
            raise ValueError("ShiftCalendar requires timezone-aware datetimes")
        return t.astimezone(self._settings.tz)

    def local_date(self, t: datetime) -> date:
        return self.to_local(t).date()

    def shift_date_of(self, t: datetime) -> date:
        local = self.to_local(t)
        if self._settings.wraps_midnight and local.time().replace(microsecond=0) <= self._settings.window_end:
            return local.date() - timedelta(days=1)
        return local.date()

    def is_in_gap(self, t: datetime) -> bool:
        tau = self.to_local(t).time().replace(microsecond=0)
        start, end = self._settings.window_start, self._settings.window_end
        if self._settings.wraps_midnight:
            return end < tau < start
        return tau < start or tau > end

    def shift_start_for(self, shift_date: date) -> datetime:
        return datetime.combine(shift_date, self._settings.window_start, tzinfo=self._settings.tz)

    def window_close_for(self, shift_date: date) -> datetime:
        """Canonical end instant of the shift keyed by `shift_date`."""

        close_day = shift_date + timedelta(days=1) if self._settings.wraps_midnight else shift_date
        return datetime.combine(close_day, self._settings.window_end, tzinfo=self._settings.tz)
