"""
Relative timeframes such as "today", "prev_week", "3_days_ago" or "last_30_mins".

A token resolves to a unit and an inclusive span of unit offsets (lower, upper) around the
bucket containing the reference instant; "this" is offset 0, "prev" counts backwards from -1
and "next" forwards from +1.
"""

import logging

from .absolute import cast_str
from .ranges import Malformed, Range, day_range, minute_range, month_range, week_range, year_range
from .zones import localize, local_timezone, now

MIN_LENGTH = 5
MAX_LENGTH = 20
MAX_OFFSET = 999

logger = logging.getLogger(__name__)

ALIASES = {
	"yesterday": -1,
	"today": 0,
	"tomorrow": 1,
}
MODIFIERS = {
	"ago": lambda n: (-n, -n),
	"ahead": lambda n: (n, n),
	"prev": lambda n: (-n, -1),
	"previous": lambda n: (-n, -1),
	"last": lambda n: (1 - n, 0),
	"this": lambda n: (0, n - 1),
	"next": lambda n: (1, n),
}


def resolve(unit, lower, upper, reference) -> Range:
	"Returns the buckets of `unit` from offset `lower` to `upper` inclusive, where offset 0 contains the reference instant."
	length = upper - lower + 1
	tzinfo = reference.tzinfo
	if unit in ("min", "minute"):
		return minute_range(reference.replace(second=0, microsecond=0), lower, length)
	elif unit == "hour":
		return minute_range(reference.replace(minute=0, second=0, microsecond=0), lower * 60, length * 60)
	elif unit == "day":
		return day_range(reference.year, reference.month, reference.day + lower, length, tzinfo)
	elif unit == "week":
		return week_range(reference, lower * 7, length * 7)
	elif unit == "month":
		return month_range(reference.year, reference.month + lower, length, tzinfo)
	elif unit == "year":
		return year_range(reference.year + lower, length, tzinfo)
	raise ValueError(f"unknown unit {unit!r}")

def span(unit, modifier, n, reference) -> Range:
	try:
		bounds = MODIFIERS[modifier]
	except KeyError:
		raise ValueError(f"unknown modifier {modifier!r}") from None
	lower, upper = bounds(n)
	return resolve(unit, lower, upper, reference)

def parse_count(s) -> int:
	if not (s.isascii() and s.isdigit()):
		raise ValueError(f"count {s!r} is not a number")
	n = int(s)
	if n > MAX_OFFSET:
		raise ValueError(f"count {n} exceeds {MAX_OFFSET}")
	return n


def _parse(s, reference):
	if not MIN_LENGTH <= len(s) <= MAX_LENGTH:
		raise ValueError(f"length {len(s)} not in range {MIN_LENGTH}-{MAX_LENGTH}")
	i = s.find("_")
	if i == -1:
		try:
			n = ALIASES[s]
		except KeyError:
			raise ValueError(f"unknown alias {s!r}") from None
		return resolve("day", n, n, reference)
	j = s.rfind("_")
	if i == j:
		# prev_day, this_week, next_month
		modifier, unit = s[:i], s[j + 1:]
		if not modifier or not unit:
			raise ValueError("empty segment")
		if unit.endswith("s"):
			raise ValueError("plural unit without a count")
		if modifier == "last":
			raise ValueError("'last' requires a count")
		return span(unit, modifier, 1, reference)
	# 1_day_ago, prev_1_day
	count, unit, modifier = s[:i], s[i + 1:j], s[j + 1:]
	if not count or not unit or not modifier:
		raise ValueError("empty segment")
	if not modifier.startswith("a"):
		modifier, count, unit = count, unit, modifier
	n = parse_count(count)
	if n == 0 and not modifier.startswith("a"):
		raise ValueError("a count of 0 is only allowed with ago or ahead")
	return span(unit.removesuffix("s"), modifier, n, reference)

def parse_relative(token, reference=None) -> Range:
	"""
	Parses a relative token like 3_days_ago and returns the Range it represents.

	Args:
		token (str): The token. Accepted forms are the aliases "yesterday", "today" and "tomorrow",
			"<modifier>_<unit>" (e.g. "prev_month"), "<n>_<unit>_<ago|ahead>" (e.g. "3_days_ago")
			and "<modifier>_<n>_<unit>" (e.g. "last_30_mins"), with n between 0 and 999.
		reference (datetime, optional): The instant the token is relative to. Defaults to the current time
			in the default location; a naive datetime is read as wall-clock time in the default location.
	Returns:
		Range: Whole minutes, hours, days, ISO weeks (Monday based), months or years, in the reference's location.
	Raises:
		Malformed: If the token is not recognised.
	Modifiers (for a count of n):
		- "ago": the single bucket n units before the current one.
		- "ahead": the single bucket n units after the current one.
		- "prev", "previous": the n buckets before the current one.
		- "last": the n buckets ending with the current one.
		- "this": the n buckets starting with the current one.
		- "next": the n buckets after the current one.
	"""
	s = cast_str(token)
	if reference is None:
		reference = now()
	elif reference.tzinfo is None:
		reference = localize(reference, local_timezone())
	try:
		return _parse(s, reference)
	except (ValueError, OverflowError) as ex:
		logger.debug("rejected relative timeframe %r: %s", s, ex)
		raise Malformed(s, str(ex)) from ex
