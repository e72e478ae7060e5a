"""
Bulk time-sheet text parsing.

Turns text pasted from a spreadsheet or a notes app into one structured entry
per day. Each line maps to one calendar day, starting at ``start_day`` of the
target month. Supported line formats:

- ``HH:MM HH:MM``               start, end, no pause
- ``HH:MM 30 HH:MM``            start, pause in minutes, end
- ``HH:MM 1:00 HH:MM``          start, pause as H:MM, end
- ``HH:MM HH:MM Meeting``       anything after the end becomes notes
- empty line                    empty day (the stored entry is deleted)

Parsing never raises. Tokens that cannot be placed are kept as notes.
"""

import logging
import re

from core.dates import day_key, days_in_month
from models.time_entries import BulkLineResult, ParsedBulkLine

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{1,2})$")
PAUSE_HHMM_PATTERN = re.compile(r"^(\d{1,3}):(\d{1,2})$")
PAUSE_MINUTES_PATTERN = re.compile(r"^\d{1,4}$")


def normalize_time(value: str) -> str | None:
    """
    Normalize a time-of-day token to HH:MM.

    Accepts ``8:45``, ``08:45`` and ``8.45``. Returns None when the token is not
    a valid time between 00:00 and 23:59.
    """
    match = TIME_PATTERN.match(value.strip().replace(".", ":"))
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


def parse_pause_to_minutes(token: str | None) -> int | None:
    """
    Parse a pause token to minutes.

    ``90`` is minutes, ``1:30`` and ``1.30`` are hours and minutes.
    Returns None if the token is not a duration.
    """
    if not token or not token.strip():
        return None
    cleaned = token.strip()

    match = PAUSE_HHMM_PATTERN.match(cleaned.replace(".", ":"))
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    if PAUSE_MINUTES_PATTERN.match(cleaned):
        return int(cleaned)

    return None


def parse_line(line: str) -> ParsedBulkLine:
    """Parse one pasted line into start, pause, end and notes."""
    tokens = line.split()
    if not tokens:
        return ParsedBulkLine(is_empty=True)

    start = normalize_time(tokens[0])
    if start is None:
        # No leading time: keep the text so nothing the user typed is lost
        logger.debug("No start time in line %r, keeping it as notes", line)
        return ParsedBulkLine(is_empty=False, notes=" ".join(tokens))

    end = None
    pause = 0
    leftovers: list[str] = []
    consumed = 1

    third = normalize_time(tokens[2]) if len(tokens) >= 3 else None
    second_as_pause = parse_pause_to_minutes(tokens[1]) if len(tokens) >= 2 else None

    if third and second_as_pause is not None:
        # start pause end
        pause = second_as_pause
        end = third
        consumed = 3
    elif len(tokens) >= 2 and normalize_time(tokens[1]):
        # start end [notes...]
        end = normalize_time(tokens[1])
        consumed = 2
    elif third:
        # start <not a pause> end: the middle token is a note
        end = third
        leftovers.append(tokens[1])
        consumed = 3
    else:
        logger.debug("No end time in line %r", line)

    notes = " ".join(leftovers + tokens[consumed:])
    return ParsedBulkLine(is_empty=False, start=start, end=end, pause_minutes=pause, notes=notes)


def parse_bulk_time_text(
    raw_text: str, year: int, month: int, start_day: int = 1
) -> list[BulkLineResult]:
    """
    Parse multi-line pasted text into per-day results.

    Args:
        raw_text: Pasted text, one line per day
        year: Target year
        month: Target month (1-12)
        start_day: Day of month the first line maps to (clamped to the month)

    Returns:
        One result per line in line order. Lines past the end of the month are
        ignored; days after the last line are not touched.
    """
    lines = raw_text.replace("\r\n", "\n").splitlines()
    total_days = days_in_month(year, month)
    first_day = max(1, min(total_days, start_day))

    results = []
    for day, line in zip(range(first_day, total_days + 1), lines):
        results.append(BulkLineResult(date=day_key(year, month, day), parsed=parse_line(line)))

    if len(lines) > len(results):
        logger.debug(
            "Ignored %d lines past the end of %d-%02d", len(lines) - len(results), year, month
        )
    return results
