"""
Expands short date tokens into half-open time intervals.

>>> expand("2017-03-18", "UTC")
Range(2017-03-18T00:00:00+00:00, 2017-03-19T00:00:00+00:00, 'UTC')
>>> expand("2017W116", "UTC") == expand("2017-077", "UTC")
True
"""

import logging

from .absolute import ALLOW_YYYYMM, cast_str, parse_absolute
from .ranges import ZERO_RANGE, ZERO_TIME, Malformed, Range
from .relative import parse_relative
from .zones import get_timezone, now

__all__ = [
	"ALLOW_YYYYMM", "ZERO_RANGE", "ZERO_TIME",
	"Malformed", "Range",
	"expand", "parse_absolute", "parse_relative",
	"get_timezone", "now",
]

logger = logging.getLogger(__name__)


def expand(token, location=None) -> Range:
	"""
	Parses a token like 2017-03-18 or 3_days_ago and returns the Range it represents.

	Every absolute token begins with a four digit year, so a token whose fourth character is a digit
	is parsed as absolute; anything else is parsed as relative to the current time at the location.

	Args:
		token (str): The token to expand.
		location (optional): A tzinfo, zone name or offset in hours. Defaults to the local timezone.
	Returns:
		Range: The interval the token represents, in the given location.
	Raises:
		Malformed: If the token is not recognised.
		pytz.UnknownTimeZoneError: If the location is a name that matches no zone.
	"""
	s = cast_str(token)
	if len(s) < 4:
		# Shortest tokens are "2017" and "today"
		raise Malformed(s, "shorter than 4 characters")
	tzinfo = get_timezone(location)
	if "0" <= s[3] <= "9":
		logger.debug("expanding %r as absolute", s)
		return parse_absolute(s, tzinfo)
	logger.debug("expanding %r as relative", s)
	return parse_relative(s, now(tzinfo))
