import datetime
import logging
import os

import pytz
from dateutil import tz

number = int | float
TZ_ENV = "TIMEFRAME_TZ"

logger = logging.getLogger(__name__)

TIMEZONES = {}
# Case-insensitive lookup of every pytz zone, plus its last path component ("london", "new_york")
for name in pytz.all_timezones:
	TIMEZONES[name.casefold()] = name
	if "/" in name and not name.startswith("Etc/"):
		TIMEZONES.setdefault(name.rsplit("/", 1)[-1].casefold(), name)


def retrieve_tz(name) -> pytz.BaseTzInfo | None:
	"Gets a pytz timezone from a string, retrying with the last part of the string if the first attempt fails."
	name = name.strip().casefold()
	try:
		return pytz.timezone(TIMEZONES[name])
	except KeyError:
		if "/" in name:
			try:
				return pytz.timezone(TIMEZONES[name.rsplit("/", 1)[-1]])
			except KeyError:
				pass

def local_timezone() -> datetime.tzinfo:
	"""
	Gets the default location.

	The TIMEFRAME_TZ environment variable takes precedence over the system local zone.
	Both are looked up on every call so a changed environment is always honoured.
	"""
	name = os.environ.get(TZ_ENV)
	if name:
		tzinfo = retrieve_tz(name)
		if tzinfo is None:
			raise pytz.UnknownTimeZoneError(name)
		logger.debug("default location %s taken from %s", tzinfo.zone, TZ_ENV)
		return tzinfo
	return tz.tzlocal()

def get_timezone(location=None) -> datetime.tzinfo:
	"Gets a timezone from a tzinfo, a zone name, or a number of hours east of UTC. None means the default location."
	if location is None:
		return local_timezone()
	if isinstance(location, datetime.tzinfo):
		return location
	if isinstance(location, number):
		return pytz.FixedOffset(round(location * 60))
	tzinfo = retrieve_tz(location)
	if tzinfo is None:
		raise pytz.UnknownTimeZoneError(location)
	return tzinfo

def now(location=None) -> datetime.datetime:
	"Gets the current instant at a location."
	return datetime.datetime.now(tz=pytz.utc).astimezone(get_timezone(location))

def zone_name(tzinfo) -> str:
	"Gets the canonical name of a timezone where possible."
	if tzinfo is None:
		return ""
	if tzinfo in (datetime.timezone.utc, pytz.utc):
		return "UTC"
	name = getattr(tzinfo, "zone", None) or getattr(tzinfo, "key", None)
	if name:
		return name
	return str(tzinfo)


def localize(naive, tzinfo) -> datetime.datetime:
	"""
	Attaches a location to a wall-clock time.

	Nonexistent local times (a spring-forward gap) are moved forward by the size of the gap,
	and ambiguous ones (a fall-back overlap) resolve to the later, standard-time occurrence.
	"""
	if isinstance(tzinfo, pytz.BaseTzInfo):
		return tzinfo.normalize(tzinfo.localize(naive, is_dst=False))
	dt = naive.replace(tzinfo=tzinfo)
	try:
		exists = tz.datetime_exists(dt)
	except OverflowError:
		# Too close to datetime.min to round-trip through UTC
		exists = True
	if not exists:
		return tz.resolve_imaginary(dt)
	if tz.datetime_ambiguous(dt):
		return tz.enfold(dt, fold=1)
	return dt

def shift(dt, delta) -> datetime.datetime:
	"Adds a fixed duration to an aware datetime, measured in elapsed time rather than wall-clock time."
	return (dt.astimezone(pytz.utc) + delta).astimezone(dt.tzinfo)
