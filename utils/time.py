"""Time utilities: timezone-aware helpers and Spanish date expressions."""
from __future__ import annotations
import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

__all__ = ["utc_now", "iso_utc", "local_today", "fold_text", "parse_date_expression"]

WEEKDAYS = {
    "lunes": 0, "martes": 1, "miercoles": 2, "jueves": 3,
    "viernes": 4, "sabado": 5, "domingo": 6,
}

MONTHS = {
    "enero": 1, "febrero": 2, "marzo": 3, "abril": 4, "mayo": 5, "junio": 6,
    "julio": 7, "agosto": 8, "septiembre": 9, "setiembre": 9, "octubre": 10,
    "noviembre": 11, "diciembre": 12,
}


def utc_now() -> datetime:
    """Return an aware UTC datetime."""
    return datetime.now(timezone.utc)


def iso_utc(dt: Optional[datetime] = None) -> str:
    """Return ISO8601 string with Z suffix for given datetime (defaults to now)."""
    if dt is None:
        dt = utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def local_today(tz_name: str) -> date:
    """Today's date in the given IANA timezone."""
    return utc_now().astimezone(ZoneInfo(tz_name)).date()


def fold_text(text: str) -> str:
    """Lower-case and strip accents one character at a time.

    The result has the same length as the input, so spans found in the
    folded text can be used to slice the original.
    """
    return "".join(unicodedata.normalize("NFD", ch.lower())[0] for ch in text)


def parse_date_expression(expression: str, today: date) -> date:
    """Resolve a Spanish date expression relative to ``today``.

    Accepts ISO dates, dd/mm/yyyy, dd-mm-yyyy, dd/mm, "5 de noviembre [de 2026]",
    hoy, mañana, pasado mañana and weekday names ("el próximo viernes").
    Raises ValueError for anything else, including impossible dates.
    """
    text = re.sub(r"\s+", " ", fold_text(expression)).strip()
    text = re.sub(r"^(?:el\s+)?(?:dia\s+)?", "", text)

    if text == "hoy":
        return today
    if text == "manana":
        return today + timedelta(days=1)
    if text == "pasado manana":
        return today + timedelta(days=2)

    m = re.fullmatch(r"(?:proximo\s+)?(lunes|martes|miercoles|jueves|viernes|sabado|domingo)", text)
    if m:
        ahead = (WEEKDAYS[m.group(1)] - today.weekday()) % 7 or 7
        return today + timedelta(days=ahead)

    m = re.fullmatch(r"(\d{4})-(\d{1,2})-(\d{1,2})", text)
    if m:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = re.fullmatch(r"(\d{1,2})[/-](\d{1,2})(?:[/-](\d{2}|\d{4}))?", text)
    if m:
        year = int(m.group(3)) if m.group(3) else today.year
        if year < 100:
            year += 2000
        return date(year, int(m.group(2)), int(m.group(1)))

    m = re.fullmatch(r"(\d{1,2})\s+de\s+([a-z]+)(?:\s+(?:de|del)\s+(\d{4}))?", text)
    if m and m.group(2) in MONTHS:
        year = int(m.group(3)) if m.group(3) else today.year
        return date(year, MONTHS[m.group(2)], int(m.group(1)))

    raise ValueError(f"Unrecognized date expression: {expression!r}")
