# services/booking-service/src/apps/core/services/recurrence.py
"""
Recurrence Planner

Expands a booking template into dated occurrences. Planning never checks
availability; each occurrence is validated when it is proposed.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidInterval
from .intervals import ONE_DAY, TimeInterval, get_zone, local_date, to_utc
from .records import CandidateBooking, Frequency, RecurrencePattern

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 52


class RecurrencePlanner:
    """
    Generates occurrence n by adding n days, n weeks or n calendar months to
    the template's local wall-clock start, so time of day survives DST
    changes and month-end dates clamp without drifting.

    The template itself is occurrence 0. `until` is inclusive. When both
    bounds are set, whichever is reached first stops expansion.
    """

    def expand(
        self,
        template: TimeInterval,
        pattern: RecurrencePattern,
        as_of: Optional[datetime] = None,
        tz_name: str = 'UTC'
    ) -> List[CandidateBooking]:
        self._check(template, pattern)

        date_based = template.is_date_range
        if date_based:
            local_start = template.start
        else:
            local_start = to_utc(template.start).astimezone(get_zone(tz_name)).replace(tzinfo=None)
        duration = template.duration
        limit = pattern.max_occurrences or MAX_OCCURRENCES
        as_of_utc = to_utc(as_of) if as_of is not None else None
        as_of_day = local_date(as_of, tz_name) if as_of is not None else None

        candidates = []
        step = 0
        while len(candidates) < limit:
            wall_clock = local_start + self._offset(pattern.frequency, step)
            step += 1

            occurrence_day = wall_clock if date_based else wall_clock.date()
            if pattern.until is not None and occurrence_day > pattern.until:
                break

            if date_based:
                interval = TimeInterval(wall_clock, wall_clock + duration)
                if as_of_day is not None and interval.start < as_of_day:
                    continue
            else:
                start = to_utc(wall_clock.replace(tzinfo=get_zone(tz_name)))
                interval = TimeInterval(start, start + duration)
                if as_of_utc is not None and interval.start < as_of_utc:
                    continue

            candidates.append(CandidateBooking(interval=interval, sequence=len(candidates)))

        logger.debug(
            f"Expanded {pattern.frequency.value} recurrence into {len(candidates)} occurrences"
        )
        return candidates

    def _offset(self, frequency: Frequency, step: int):
        if frequency == Frequency.DAILY:
            return ONE_DAY * step
        if frequency == Frequency.WEEKLY:
            return timedelta(weeks=step)
        return relativedelta(months=step)

    def _check(self, template: TimeInterval, pattern: RecurrencePattern):
        if template.is_empty:
            raise InvalidInterval("Template interval has zero or negative duration")
        if pattern.until is None and pattern.max_occurrences is None:
            raise InvalidInterval("Recurrence needs an end date or a number of occurrences")
        if pattern.max_occurrences is not None and not 1 <= pattern.max_occurrences <= MAX_OCCURRENCES:
            raise InvalidInterval(
                f"Occurrences must be between 1 and {MAX_OCCURRENCES}",
                details={"max_occurrences": pattern.max_occurrences}
            )
        try:
            Frequency(pattern.frequency)
        except ValueError:
            raise InvalidInterval(f"Unknown frequency: {pattern.frequency}")
