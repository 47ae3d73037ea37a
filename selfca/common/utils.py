"""Small time helpers used by the certificate builder.

Provided:
- now_utc() -> datetime: current UTC time truncated to whole seconds
- add_months(dt, months) -> datetime: calendar month arithmetic

X.509 validity times are encoded with one-second resolution, so the
builder works with whole seconds from the start. That way the template
and the parsed certificate report identical timestamps.
"""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
	"""Return the current UTC time without microseconds."""
	return datetime.now(timezone.utc).replace(microsecond=0)


def add_months(dt: datetime, months: int) -> datetime:
	"""Return `dt` shifted by `months` calendar months.

	Days that overflow the target month roll into the next one, so
	Jan 31 + 1 month is Mar 3 (Mar 2 in a leap year). Time of day and
	tzinfo are preserved.
	"""
	month_index = dt.month - 1 + months
	year = dt.year + month_index // 12
	month = month_index % 12 + 1
	first = dt.replace(year=year, month=month, day=1)
	return first + timedelta(days=dt.day - 1)
