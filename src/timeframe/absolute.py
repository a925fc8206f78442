"""
Absolute timeframes: ISO 8601 calendar dates, week dates, ordinal dates and truncated date-times.

Tokens are classified by the position of their first dash and then by their length; each
(shape, length) pair selects exactly one production, so near-miss layouts such as
"2017-03x18" or "20170318T225" are rejected rather than guessed at.
"""

import datetime
import functools
import logging
import re

from .ranges import MAX_YEAR, MIN_YEAR, Malformed, Range, day_range, duration_range, iso_week_range, month_range, year_range
from .zones import get_timezone, localize

# Disallowed by ISO 8601 to avoid confusion with YYMMDD
ALLOW_YYYYMM = True
MIN_LENGTH = 4
MAX_LENGTH = 23

logger = logging.getLogger(__name__)


def cast_str(s) -> str:
	if isinstance(s, memoryview):
		s = bytes(s)
	if isinstance(s, bytes):
		s = s.decode("utf-8", "replace")
	return str(s)

def month_days(year, month) -> int:
	"Gets the amount of days in a particular Gregorian calendar month."
	if month in (4, 6, 9, 11):
		return 30
	elif month == 2:
		if not year % 400:
			return 29
		elif not year % 100:
			return 28
		elif not year % 4:
			return 29
		return 28
	return 31

def parse_field(s, lo, hi, name="field") -> int:
	"Parses an unsigned decimal field, raising ValueError unless it lies within [lo, hi]."
	if not (s.isascii() and s.isdigit()):
		raise ValueError(f"{name} {s!r} is not a number")
	n = int(s)
	if not lo <= n <= hi:
		raise ValueError(f"{name} {n} not in range {lo}-{hi}")
	return n


def _year(s, tzinfo):
	return year_range(parse_field(s, MIN_YEAR, MAX_YEAR, "year"), 1, tzinfo)

def _month(sy, sm, tzinfo):
	y = parse_field(sy, MIN_YEAR, MAX_YEAR, "year")
	m = parse_field(sm, 1, 12, "month")
	return month_range(y, m, 1, tzinfo)

def _iso_week(sy, sw, tzinfo):
	y = parse_field(sy, MIN_YEAR, MAX_YEAR, "year")
	w = parse_field(sw, 1, 53, "week")
	return iso_week_range(y, w, 0, 7, tzinfo)

def _iso_week_date(sy, sw, swd, tzinfo):
	y = parse_field(sy, MIN_YEAR, MAX_YEAR, "year")
	w = parse_field(sw, 1, 53, "week")
	wd = parse_field(swd, 1, 7, "weekday")
	return iso_week_range(y, w, wd - 1, 1, tzinfo)

def _ordinal_date(sy, sd, tzinfo):
	y = parse_field(sy, MIN_YEAR, MAX_YEAR, "year")
	d = parse_field(sd, 1, 366, "day of year")
	return day_range(y, 1, d, 1, tzinfo)


def _wall_clock(layout, s):
	"Parses a calendar date or date-time against an exact layout, validating every field against the calendar."
	match = layout.fullmatch(s)
	if not match:
		raise ValueError(f"does not match {layout.pattern}")
	fields = match.groupdict()
	y = parse_field(fields["year"], MIN_YEAR, MAX_YEAR, "year")
	m = parse_field(fields["month"], 1, 12, "month")
	d = parse_field(fields["day"], 1, month_days(y, m), "day")
	hh = parse_field(fields.get("hour") or "0", 0, 23, "hour")
	mm = parse_field(fields.get("minute") or "0", 0, 59, "minute")
	ss = parse_field(fields.get("second") or "0", 0, 59, "second")
	ms = parse_field(fields.get("millisecond") or "0", 0, 999, "millisecond")
	return datetime.datetime(y, m, d, hh, mm, ss, ms * 1000)

def _date(layout, s, tzinfo):
	t = _wall_clock(layout, s)
	return day_range(t.year, t.month, t.day, 1, tzinfo)

def _date_time(layout, precision, s, tzinfo):
	return duration_range(localize(_wall_clock(layout, s), tzinfo), precision)


_D = r"(?P<year>[0-9]{4})(?P<month>[0-9]{2})(?P<day>[0-9]{2})"
_DX = r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
_H = r"T(?P<hour>[0-9]{2})"
_M = r"(?P<minute>[0-9]{2})"
_S = r"(?P<second>[0-9]{2})"
_F = r"\.(?P<millisecond>[0-9]{3})"

LAYOUTS = {
	"YYYYMMDD": re.compile(_D),
	"YYYYMMDDThh": re.compile(_D + _H),
	"YYYYMMDDThhmm": re.compile(_D + _H + _M),
	"YYYYMMDDThhmmss": re.compile(_D + _H + _M + _S),
	"YYYYMMDDThhmmss.fff": re.compile(_D + _H + _M + _S + _F),
	"YYYY-MM-DD": re.compile(_DX),
	"YYYY-MM-DDThh": re.compile(_DX + _H),
	"YYYY-MM-DDThh:mm": re.compile(_DX + _H + ":" + _M),
	"YYYY-MM-DDThh:mm:ss": re.compile(_DX + _H + ":" + _M + ":" + _S),
	"YYYY-MM-DDThh:mm:ss.fff": re.compile(_DX + _H + ":" + _M + ":" + _S + _F),
}

HOUR = datetime.timedelta(hours=1)
MINUTE = datetime.timedelta(minutes=1)
SECOND = datetime.timedelta(seconds=1)
MILLISECOND = datetime.timedelta(milliseconds=1)


def _basic_7(s, tzinfo):
	if s[4] == "W":
		return _iso_week(s[:4], s[5:], tzinfo)
	return _ordinal_date(s[:4], s[4:], tzinfo)

def _basic_8(s, tzinfo):
	if s[4] == "W":
		return _iso_week_date(s[:4], s[5:7], s[7:], tzinfo)
	return _date(LAYOUTS["YYYYMMDD"], s, tzinfo)

def _extended_8(s, tzinfo):
	if s[5] == "W":
		return _iso_week(s[:4], s[6:], tzinfo)
	return _ordinal_date(s[:4], s[5:], tzinfo)

def _extended_10(s, tzinfo):
	if s[5] == "W" and s[8] == "-":
		return _iso_week_date(s[:4], s[6:8], s[9:], tzinfo)
	return _date(LAYOUTS["YYYY-MM-DD"], s, tzinfo)

# Productions for tokens without a dash, keyed by length
BASIC = {
	4: _year,
	6: lambda s, tzinfo: _month(s[:4], s[4:], tzinfo),
	7: _basic_7,
	8: _basic_8,
	11: functools.partial(_date_time, LAYOUTS["YYYYMMDDThh"], HOUR),
	13: functools.partial(_date_time, LAYOUTS["YYYYMMDDThhmm"], MINUTE),
	15: functools.partial(_date_time, LAYOUTS["YYYYMMDDThhmmss"], SECOND),
	19: functools.partial(_date_time, LAYOUTS["YYYYMMDDThhmmss.fff"], MILLISECOND),
}
# Productions for tokens with their first dash at index 4, keyed by length
EXTENDED = {
	7: lambda s, tzinfo: _month(s[:4], s[5:], tzinfo),
	8: _extended_8,
	10: _extended_10,
	13: functools.partial(_date_time, LAYOUTS["YYYY-MM-DDThh"], HOUR),
	16: functools.partial(_date_time, LAYOUTS["YYYY-MM-DDThh:mm"], MINUTE),
	19: functools.partial(_date_time, LAYOUTS["YYYY-MM-DDThh:mm:ss"], SECOND),
	23: functools.partial(_date_time, LAYOUTS["YYYY-MM-DDThh:mm:ss.fff"], MILLISECOND),
}


def production(s, allow_yyyymm=ALLOW_YYYYMM):
	"Selects the grammar production for a token from its dash position and length."
	if not MIN_LENGTH <= len(s) <= MAX_LENGTH:
		raise ValueError(f"length {len(s)} not in range {MIN_LENGTH}-{MAX_LENGTH}")
	i = s.find("-")
	if i == -1:
		if len(s) == 6 and not allow_yyyymm:
			raise ValueError("YYYYMM is disabled")
		table = BASIC
	elif i == 4:
		table = EXTENDED
	else:
		raise ValueError(f"unexpected '-' at index {i}")
	try:
		return table[len(s)]
	except KeyError:
		raise ValueError(f"no production of length {len(s)}") from None

def parse_absolute(token, location=None, *, allow_yyyymm=ALLOW_YYYYMM) -> Range:
	"""
	Parses an absolute token like 2017-03-18 and returns the Range it represents.

	Args:
		token (str): The token, e.g. "2017", "2017-03", "2017W11", "2017-077", "2017-W11-6" or "2017-03-18T22:50".
		location (optional): The location the calendar fields are read in. Defaults to the local timezone.
		allow_yyyymm (bool, optional): Whether to accept the compact YYYYMM year-month form. Defaults to True.
	Returns:
		Range: One year, month, ISO week or day, or one unit of the finest time field given.
	Raises:
		Malformed: If the token matches no production or names a date that does not exist.
	Examples:
		>>> parse_absolute("2017-W11", "UTC")
		Range(2017-03-13T00:00:00+00:00, 2017-03-20T00:00:00+00:00, 'UTC')
		>>> parse_absolute("2017-03-18T22", "UTC")
		Range(2017-03-18T22:00:00+00:00, 2017-03-18T23:00:00+00:00, 'UTC')
	"""
	s = cast_str(token)
	tzinfo = get_timezone(location)
	try:
		return production(s, allow_yyyymm)(s, tzinfo)
	except (ValueError, OverflowError) as ex:
		logger.debug("rejected absolute timeframe %r: %s", s, ex)
		raise Malformed(s, str(ex)) from ex
