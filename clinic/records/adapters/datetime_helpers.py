import calendar
import datetime as dt

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def parse_date(value: str) -> dt.date:
    """Parse ``YYYY-MM-DD``. Raises ``ValueError`` on anything else."""
    return dt.datetime.strptime(value.strip(), DATE_FORMAT).date()


def parse_time(value: str) -> dt.time:
    """Parse a 24-hour ``HH:MM``. Raises ``ValueError`` on anything else."""
    return dt.datetime.strptime(value.strip(), TIME_FORMAT).time()


def format_date(date: dt.date) -> str:
    return date.strftime(DATE_FORMAT)


def format_time(time: dt.time) -> str:
    return time.strftime(TIME_FORMAT)


def format_date_time(date: dt.date, time: dt.time) -> str:
    """Convert ``date(2026, 3, 22), time(9, 5)`` → ``22/03/2026 at 09:05`` for display."""
    return f"{date.strftime('%d/%m/%Y')} at {time.strftime('%H:%M')}"


def subtract_months(date: dt.date, months: int) -> dt.date:
    """Step back whole calendar months, clamping the day to the target month's length.

    ``subtract_months(date(2026, 3, 31), 1)`` → ``date(2026, 2, 28)``.
    """
    index = date.year * 12 + (date.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(date.day, calendar.monthrange(year, month)[1])
    return dt.date(year, month, day)
