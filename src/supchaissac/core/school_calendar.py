"""
School Calendar

French public holidays, zone B school holidays and school-year arithmetic.

A school year runs from September 1 to August 31 and is labelled
"2024-2025". Sessions cannot be declared on weekends, public holidays
or during school holidays.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from dateutil.easter import EASTER_WESTERN, easter


@dataclass(frozen=True)
class HolidayPeriod:
    """Inclusive date range during which the school is closed."""

    name: str
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


# Zone B (académie de Nantes)
SCHOOL_HOLIDAYS: dict[str, list[HolidayPeriod]] = {
    "2024-2025": [
        HolidayPeriod("Vacances de la Toussaint", date(2024, 10, 19), date(2024, 11, 4)),
        HolidayPeriod("Vacances de Noël", date(2024, 12, 21), date(2025, 1, 5)),
        HolidayPeriod("Vacances d'hiver", date(2025, 2, 8), date(2025, 2, 24)),
        HolidayPeriod("Vacances de printemps", date(2025, 4, 5), date(2025, 4, 22)),
        HolidayPeriod("Vacances d'été", date(2025, 7, 5), date(2025, 9, 1)),
    ],
    "2025-2026": [
        HolidayPeriod("Vacances de la Toussaint", date(2025, 10, 18), date(2025, 11, 3)),
        HolidayPeriod("Vacances de Noël", date(2025, 12, 20), date(2026, 1, 4)),
        HolidayPeriod("Vacances d'hiver", date(2026, 2, 14), date(2026, 3, 2)),
        HolidayPeriod("Vacances de printemps", date(2026, 4, 11), date(2026, 4, 27)),
        HolidayPeriod("Vacances d'été", date(2026, 7, 4), date(2026, 9, 1)),
    ],
}

WEEKEND_REASON = "Week-end"


def easter_sunday(year: int) -> date:
    return easter(year, EASTER_WESTERN)


def french_public_holidays(year: int) -> dict[date, str]:
    """Map each public holiday of ``year`` to its name."""
    easter_day = easter_sunday(year)
    return {
        date(year, 1, 1): "Jour de l'An",
        easter_day + timedelta(days=1): "Lundi de Pâques",
        date(year, 5, 1): "Fête du Travail",
        date(year, 5, 8): "Victoire 1945",
        easter_day + timedelta(days=39): "Ascension",
        easter_day + timedelta(days=50): "Lundi de Pentecôte",
        date(year, 7, 14): "Fête Nationale",
        date(year, 8, 15): "Assomption",
        date(year, 11, 1): "Toussaint",
        date(year, 11, 11): "Armistice 1918",
        date(year, 12, 25): "Noël",
    }


def school_year_for(day: date) -> str:
    """Return the school year label containing ``day``."""
    start_year = day.year if day.month >= 9 else day.year - 1
    return f"{start_year}-{start_year + 1}"


def current_school_year(today: date | None = None) -> str:
    return school_year_for(today or date.today())


def school_year_bounds(school_year: str) -> tuple[date, date]:
    """
    Return (September 1, August 31) for a "YYYY-YYYY" label.

    Raises:
        ValueError: If the label is malformed or the years are not consecutive
    """
    try:
        first, second = (int(part) for part in school_year.split("-"))
    except ValueError as e:
        raise ValueError(f"Invalid school year: {school_year!r}") from e
    if second != first + 1:
        raise ValueError(f"Invalid school year: {school_year!r}")
    return date(first, 9, 1), date(second, 8, 31)


def blocked_reason(day: date) -> str | None:
    """
    Explain why no session can be declared on ``day``.

    Returns:
        None for an ordinary school day, otherwise a human readable reason
    """
    if day.weekday() >= 5:
        return WEEKEND_REASON

    public_holiday = french_public_holidays(day.year).get(day)
    if public_holiday:
        return f"Jour férié ({public_holiday})"

    for periods in SCHOOL_HOLIDAYS.values():
        for period in periods:
            if period.contains(day):
                return period.name

    return None


def is_blocked_date(day: date) -> bool:
    return blocked_reason(day) is not None


def blocked_dates_between(start: date, end: date) -> list[tuple[date, str]]:
    """List every blocked day in the inclusive range with its reason."""
    blocked = []
    day = start
    while day <= end:
        reason = blocked_reason(day)
        if reason:
            blocked.append((day, reason))
        day += timedelta(days=1)
    return blocked
