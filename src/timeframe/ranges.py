import dataclasses
import datetime

from dateutil.relativedelta import relativedelta

from .zones import localize, shift, zone_name

MIN_YEAR = 1
MAX_YEAR = 9999
ZERO_TIME = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


@dataclasses.dataclass(frozen=True, slots=True)
class Range:
	"A half-open interval of time, from lower_inc (inclusive) to upper_exc (exclusive), both in the same location."

	lower_inc: datetime.datetime
	upper_exc: datetime.datetime

	def __repr__(self):
		return self.__class__.__name__ + f"({self.lower_inc.isoformat()}, {self.upper_exc.isoformat()}, {zone_name(self.lower_inc.tzinfo)!r})"

	def is_zero(self) -> bool:
		"Reports whether this is the zero range, which no grammar production can produce."
		return self.lower_inc == ZERO_TIME and self.upper_exc == ZERO_TIME

ZERO_RANGE = Range(ZERO_TIME, ZERO_TIME)


class Malformed(ValueError):
	"""
	Raised when a token is not recognised by any production of the absolute or relative grammar.

	Wrong lengths, misplaced delimiters, out-of-range fields, unknown modifiers or units,
	and dates that do not exist on the calendar all end up here. No partial result is ever
	produced; the range attribute is always the zero range.
	"""

	range = ZERO_RANGE

	def __init__(self, token, reason=None):
		self.token = token
		self.reason = reason
		message = f"Timeframe not recognised: {token!r}"
		if reason:
			message += f" ({reason})"
		super().__init__(message)


def _span(start, delta) -> Range:
	# The end is computed on the start's wall clock so calendar units keep their length across DST
	end = localize(start.replace(tzinfo=None) + delta, start.tzinfo)
	return Range(start, end)

def year_range(year, length, tzinfo) -> Range:
	"Returns `length` years starting on January 1st of the given year."
	start = localize(datetime.datetime(year, 1, 1), tzinfo)
	return _span(start, relativedelta(years=length))

def month_range(year, month, length, tzinfo) -> Range:
	"Returns `length` months starting on the first of the given month. Months outside 1-12 carry into the year."
	start = localize(datetime.datetime(year, 1, 1) + relativedelta(months=month - 1), tzinfo)
	return _span(start, relativedelta(months=length))

def day_range(year, month, day, length, tzinfo) -> Range:
	"Returns `length` days starting at midnight of the given day. Days outside the month carry into adjacent months."
	start = localize(datetime.datetime(year, month, 1) + relativedelta(days=day - 1), tzinfo)
	return _span(start, relativedelta(days=length))

def minute_range(start, offset, length) -> Range:
	"Returns `length` minutes of elapsed time, beginning `offset` minutes after an aware, minute-aligned start."
	lower = shift(start, datetime.timedelta(minutes=offset))
	return Range(lower, shift(lower, datetime.timedelta(minutes=length)))

def duration_range(start, delta) -> Range:
	"Returns a fixed-duration interval beginning at an exact instant."
	return Range(start, shift(start, delta))

def week_range(reference, offset, length) -> Range:
	"Returns `length` days beginning `offset` days after the Monday of the week containing the reference instant."
	return day_range(reference.year, reference.month, reference.day - reference.weekday() + offset, length, reference.tzinfo)

def iso_week_range(year, week, offset, length, tzinfo) -> Range:
	"""
	Returns `length` days beginning `offset` days into ISO week `week` of `year`.

	January 4th always falls in week 1, so week 1 begins on the Monday on or before it.
	Week numbers beyond the last week of the year are not rejected; they roll into the next year.
	"""
	jan4 = datetime.date(year, 1, 4)
	return day_range(year, 1, 4 - jan4.weekday() + (week - 1) * 7 + offset, length, tzinfo)
