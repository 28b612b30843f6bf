# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Why is everything in one file?
#   - Flat is better than nested
#   - It prevents circular imports since the fields, zones and chronologies
#     'know' about each other
#   - It's easier to vendor (i.e. copy-paste) this library if needed
# - All instants are integer milliseconds since 1970-01-01T00:00:00Z.
#   Python ints don't overflow, so the 64-bit bounds of the timeline are
#   checked explicitly wherever an offset is applied.
# - There is some code duplication in this file. This is intentional:
#   - It makes it easier to understand the code
#   - It saves some overhead
from __future__ import annotations

__version__ = "0.1.0"

import os
from abc import ABC, abstractmethod
from calendar import day_abbr, day_name, isleap, month_abbr, month_name, monthrange
from datetime import (
    MAXYEAR,
    MINYEAR,
    date as _date,
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
)
from operator import attrgetter
from typing import TYPE_CHECKING, Callable, ClassVar, Union

from zoneinfo import ZoneInfo

from tzlocal import get_localzone_name

__all__ = [
    # timeline
    "MAX_INSTANT",
    "MIN_INSTANT",
    "MILLIS_PER_SECOND",
    "MILLIS_PER_MINUTE",
    "MILLIS_PER_HOUR",
    "MILLIS_PER_HALFDAY",
    "MILLIS_PER_DAY",
    "MILLIS_PER_WEEK",
    # timezones
    "TimeZone",
    "FixedOffsetZone",
    "IANAZone",
    "UTC",
    "system_zone",
    # fields
    "DurationField",
    "DateTimeField",
    "UnsupportedDurationField",
    "PreciseDurationField",
    "ScaledDurationField",
    "PreciseDateTimeField",
    # chronologies
    "Chronology",
    "ISOChronology",
    "ZonedChronology",
    "ZonedDurationField",
    "ZonedDateTimeField",
    # exceptions
    "ArithmeticOverflow",
    "InvalidLocalInstant",
    "InvalidFieldValue",
    "UnsupportedField",
]


MILLIS_PER_SECOND = 1_000
MILLIS_PER_MINUTE = 60_000
MILLIS_PER_HOUR = 3_600_000
MILLIS_PER_HALFDAY = 43_200_000
MILLIS_PER_DAY = 86_400_000
MILLIS_PER_WEEK = 604_800_000

MAX_INSTANT = 2**63 - 1
MIN_INSTANT = -(2**63)
_MAX_INT = 2**31 - 1
_MIN_INT = -(2**31)

# Units shorter than this are "time units": offsets are kept constant
# while adding them. Longer units are "date units": they keep the local time.
_TIME_UNIT_THRESHOLD = 12 * MILLIS_PER_HOUR
# Local instants closer than this to the epoch are never clamped
_NEAR_ZERO = 7 * MILLIS_PER_DAY
# The proleptic Gregorian average lengths of the imprecise units
_AVERAGE_MILLIS_PER_YEAR = 31_556_952_000
_AVERAGE_MILLIS_PER_MONTH = 2_629_746_000


class ArithmeticOverflow(OverflowError):
    """An instant went beyond the range of 64-bit milliseconds"""


class InvalidLocalInstant(ValueError):
    """A local time doesn't exist in a timezone, e.g. because of DST.

    Example
    -------

    >>> ams = ZonedChronology(ISOChronology.UTC, IANAZone("Europe/Amsterdam"))
    >>> ams.get_date_time_millis(2023, 3, 26, 2, 30)
    Traceback (most recent call last):
      ...
    InvalidLocalInstant: Illegal instant due to time zone offset transition
    (daylight savings time 'gap'): 2023-03-26T02:30:00.000 (Europe/Amsterdam)
    """

    def __init__(self, local_instant: int, zone_id: str) -> None:
        super().__init__(
            "Illegal instant due to time zone offset transition "
            f"(daylight savings time 'gap'): "
            f"{_format_local(local_instant)} ({zone_id})"
        )
        self.local_instant = local_instant
        self.zone_id = zone_id


class InvalidFieldValue(ValueError):
    """A value isn't valid for a datetime field"""

    def __init__(
        self,
        field_name: str,
        value: object,
        lower: int | None = None,
        upper: int | None = None,
        *,
        explanation: str | None = None,
    ) -> None:
        if explanation is None:
            msg = (
                f"Value {value!r} for {field_name} must be "
                f"in the range [{lower},{upper}]"
            )
        else:
            msg = f"Value {value!r} for {field_name} is not supported: {explanation}"
        super().__init__(msg)
        self.field_name = field_name
        self.value = value
        self.lower = lower
        self.upper = upper


class UnsupportedField(Exception):
    """A field isn't supported by the calendar system"""

    @classmethod
    def for_field(cls, name: str) -> UnsupportedField:
        return cls(f"{name} field is unsupported")


def _add_offset_checked(instant: int, offset: int) -> int:
    total = instant + offset
    # With fixed-width integers this is a sign change while both
    # operands share a sign.
    if total > MAX_INSTANT or total < MIN_INSTANT:
        raise ArithmeticOverflow("Adding time zone offset caused overflow")
    return total


def _subtract_offset_checked(instant: int, offset: int) -> int:
    diff = instant - offset
    if diff > MAX_INSTANT or diff < MIN_INSTANT:
        raise ArithmeticOverflow("Subtracting time zone offset caused overflow")
    return diff


def _safe_add(a: int, b: int) -> int:
    total = a + b
    if total > MAX_INSTANT or total < MIN_INSTANT:
        raise ArithmeticOverflow(
            f"The calculation caused an overflow: {a} + {b}"
        )
    return total


def _safe_to_int(value: int) -> int:
    if not _MIN_INT <= value <= _MAX_INT:
        raise ArithmeticOverflow(f"Value cannot fit in an int: {value}")
    return value


def _trunc_div(a: int, b: int) -> int:
    # division rounding towards zero, unlike Python's floor division
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _verify_bounds(name: str, value: int, lower: int, upper: int) -> None:
    if not lower <= value <= upper:
        raise InvalidFieldValue(name, value, lower, upper)


def _wrap(value: int, lower: int, upper: int) -> int:
    return (value - lower) % (upper - lower + 1) + lower


# ---------------------------------------------------------------------------
# Timezones
# ---------------------------------------------------------------------------


class TimeZone(ABC):
    """Abstract base class for timezones: the relation between
    UTC instants and local (wall clock) instants.

    Offsets are in milliseconds, and added to a UTC instant to
    obtain the local instant.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def id(self) -> str:
        """The identifier of the zone, used in diagnostics"""

    @abstractmethod
    def offset_at(self, instant: int, /) -> int:
        """The offset in effect at the given UTC instant"""

    @abstractmethod
    def offset_from_local(self, local_instant: int, /) -> int:
        """The offset to subtract from a local instant to obtain UTC.

        When the local instant is ambiguous, the offset of the earlier
        instant is returned. When it falls in a gap, the offset from
        before the transition is returned.
        """

    @abstractmethod
    def is_fixed(self) -> bool:
        """Whether the offset never changes"""

    def utc_to_local(self, instant: int, /) -> int:
        """Convert a UTC instant to a local instant.

        Raises
        ------
        ArithmeticOverflow
            If the result is beyond the range of the timeline
        """
        return _add_offset_checked(instant, self.offset_at(instant))

    def local_to_utc(
        self, local_instant: int, /, strict: bool = False, hint: int | None = None
    ) -> int:
        """Convert a local instant to a UTC instant.

        If ``hint`` is given and its offset is valid for the local
        instant, that offset is used. This keeps the result on the same
        side of an overlap as the hint.
        Otherwise, local times in a gap are shifted forward by
        the length of the gap, unless ``strict`` is set.

        Raises
        ------
        InvalidLocalInstant
            If ``strict`` and the local instant falls in a gap
        ArithmeticOverflow
            If the result is beyond the range of the timeline
        """
        if hint is not None:
            offset = self.offset_at(hint)
            utc = local_instant - offset
            if self.offset_at(utc) == offset:
                return _subtract_offset_checked(local_instant, offset)
        offset = self.offset_from_local(local_instant)
        if strict and self.offset_at(local_instant - offset) != offset:
            raise InvalidLocalInstant(local_instant, self.id)
        return _subtract_offset_checked(local_instant, offset)

    def is_local_gap(self, local_instant: int, /) -> bool:
        """Whether the local instant is skipped by a transition"""
        offset = self.offset_from_local(local_instant)
        return self.offset_at(local_instant - offset) != offset

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"

    # We don't need to copy, because it's immutable
    def __copy__(self) -> TimeZone:
        return self

    def __deepcopy__(self, _: object) -> TimeZone:
        return self


class FixedOffsetZone(TimeZone):
    """A timezone with a constant offset

    Example
    -------

    >>> FixedOffsetZone(MILLIS_PER_HOUR)
    FixedOffsetZone(+01:00)
    >>> FixedOffsetZone(0) == UTC
    True

    """

    __slots__ = ("_offset", "_id")

    def __init__(self, offset: int, id: str | None = None) -> None:
        if not -MILLIS_PER_DAY < offset < MILLIS_PER_DAY:
            raise ValueError(f"Offset out of range: {offset}")
        self._offset = offset
        if id is None:
            id = "UTC" if offset == 0 else _format_offset(offset)
        self._id = id

    @property
    def id(self) -> str:
        return self._id

    @property
    def offset(self) -> int:
        return self._offset

    def offset_at(self, instant: int, /) -> int:
        return self._offset

    def offset_from_local(self, local_instant: int, /) -> int:
        return self._offset

    def is_fixed(self) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedOffsetZone):
            return NotImplemented
        return self._offset == other._offset and self._id == other._id

    def __hash__(self) -> int:
        return hash((self._offset, self._id))

    def __reduce__(self) -> tuple[object, ...]:
        return (FixedOffsetZone, (self._offset, self._id))


class IANAZone(TimeZone):
    """A timezone from the IANA database, e.g. ``Europe/Amsterdam``.

    The data is read through :mod:`zoneinfo`.

    Example
    -------

    >>> ams = IANAZone("Europe/Amsterdam")
    >>> ams.offset_at(0)
    3600000
    >>> IANAZone("invalid")
    Traceback (most recent call last):
      ...
    ZoneInfoNotFoundError: 'No time zone found with key invalid'

    Note
    ----
    Instants beyond the range of the standard library's datetime
    get the offset of the nearest instant within that range.
    """

    __slots__ = ("_tz", "_fixed")

    def __init__(self, key: str) -> None:
        self._tz = ZoneInfo(key)
        self._fixed = _has_fixed_offset(self._tz)

    @property
    def id(self) -> str:
        return self._tz.key

    def offset_at(self, instant: int, /) -> int:
        return _as_millis(
            _py_naive(instant)
            .replace(tzinfo=_UTC)
            .astimezone(self._tz)
            .utcoffset()
        )

    def offset_from_local(self, local_instant: int, /) -> int:
        # fold=0 picks the earlier of two options, which is also the
        # offset before the transition in case of a gap.
        return _as_millis(
            _py_naive(local_instant).replace(tzinfo=self._tz).utcoffset()
        )

    def is_fixed(self) -> bool:
        return self._fixed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IANAZone):
            return NotImplemented
        return self._tz.key == other._tz.key

    def __hash__(self) -> int:
        return hash(self._tz.key)

    def __reduce__(self) -> tuple[object, ...]:
        return (IANAZone, (self._tz.key,))


UTC = FixedOffsetZone(0, "UTC")


def system_zone() -> TimeZone:
    """The timezone of the system.

    This is the IANA zone named by the ``TZ`` environment variable
    if it is set, otherwise the zone configured for the host as
    detected by :mod:`tzlocal`. Only if neither is available, the
    current offset of the system is used as a fixed zone.

    Pass the result explicitly wherever a zone is needed:
    the chronologies never look it up themselves.
    """
    key = os.environ.get("TZ", "").lstrip(":") or get_localzone_name()
    if key:
        return IANAZone(key)
    return FixedOffsetZone(
        _as_millis(_datetime.now().astimezone().utcoffset())
    )


def _has_fixed_offset(tz: ZoneInfo) -> bool:
    first = _datetime(1800, 1, 1, tzinfo=tz).utcoffset()
    return all(
        _datetime(year, month, 1, tzinfo=tz).utcoffset() == first
        for year in range(1800, 2101)
        for month in (1, 4, 7, 10)
    )


def _format_offset(offset: int) -> str:
    sign = "-" if offset < 0 else "+"
    hours, rest = divmod(abs(offset), MILLIS_PER_HOUR)
    minutes, rest = divmod(rest, MILLIS_PER_MINUTE)
    seconds, millis = divmod(rest, MILLIS_PER_SECOND)
    result = f"{sign}{hours:02}:{minutes:02}"
    if seconds or millis:
        result += f":{seconds:02}"
        if millis:
            result += f".{millis:03}"
    return result


def _format_local(local_instant: int) -> str:
    try:
        return (_EPOCH + _timedelta(milliseconds=local_instant)).isoformat(
            timespec="milliseconds"
        )
    except OverflowError:
        return f"{local_instant}ms"


def _py_naive(instant: int) -> _datetime:
    return _EPOCH + _timedelta(
        milliseconds=min(max(instant, _PY_MIN_INSTANT), _PY_MAX_INSTANT)
    )


def _as_millis(td: _timedelta | None) -> int:
    assert td is not None
    return td // _ONE_MILLI


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class DurationField(ABC):
    """Abstract base class for a unit of time, such as days or hours.

    Imprecise units (e.g. months) need an instant to know their length,
    which is why most methods take one.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def name(self) -> str: ...

    def is_supported(self) -> bool:
        return True

    @abstractmethod
    def is_precise(self) -> bool:
        """Whether every unit has the same length in milliseconds"""

    @property
    @abstractmethod
    def unit_millis(self) -> int:
        """The (average, if imprecise) length of one unit"""

    def get_value(self, duration: int, instant: int) -> int:
        return _safe_to_int(self.get_value_as_long(duration, instant))

    @abstractmethod
    def get_value_as_long(self, duration: int, instant: int) -> int:
        """The number of whole units in a duration starting at the instant"""

    @abstractmethod
    def get_millis(self, value: int, instant: int) -> int:
        """The length of a number of units starting at the instant"""

    @abstractmethod
    def add(self, instant: int, value: int) -> int: ...

    def subtract(self, instant: int, value: int) -> int:
        return self.add(instant, -value)

    def get_difference(self, minuend: int, subtrahend: int) -> int:
        return _safe_to_int(self.get_difference_as_long(minuend, subtrahend))

    @abstractmethod
    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        """The number of whole units between two instants"""

    def __lt__(self, other: DurationField) -> bool:
        if not isinstance(other, DurationField):
            return NotImplemented
        return self.unit_millis < other.unit_millis

    def __gt__(self, other: DurationField) -> bool:
        if not isinstance(other, DurationField):
            return NotImplemented
        return self.unit_millis > other.unit_millis

    def __repr__(self) -> str:
        return f"DurationField[{self.name}]"


class UnsupportedDurationField(DurationField):
    """A unit which the calendar system doesn't support"""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def is_supported(self) -> bool:
        return False

    def is_precise(self) -> bool:
        return True

    @property
    def unit_millis(self) -> int:
        return 0

    def get_value_as_long(self, duration: int, instant: int) -> int:
        raise UnsupportedField.for_field(self._name)

    def get_millis(self, value: int, instant: int) -> int:
        raise UnsupportedField.for_field(self._name)

    def add(self, instant: int, value: int) -> int:
        raise UnsupportedField.for_field(self._name)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        raise UnsupportedField.for_field(self._name)


class PreciseDurationField(DurationField):
    """A unit with a fixed length in milliseconds"""

    __slots__ = ("_name", "_unit")

    def __init__(self, name: str, unit_millis: int) -> None:
        self._name = name
        self._unit = unit_millis

    @property
    def name(self) -> str:
        return self._name

    def is_precise(self) -> bool:
        return True

    @property
    def unit_millis(self) -> int:
        return self._unit

    def get_value_as_long(self, duration: int, instant: int) -> int:
        return _trunc_div(duration, self._unit)

    def get_millis(self, value: int, instant: int) -> int:
        return _safe_add(0, value * self._unit)

    def add(self, instant: int, value: int) -> int:
        return _safe_add(instant, value * self._unit)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return _trunc_div(minuend - subtrahend, self._unit)


class ScaledDurationField(DurationField):
    """A multiple of another unit, e.g. centuries of years"""

    __slots__ = ("_field", "_name", "_scalar")

    def __init__(self, field: DurationField, name: str, scalar: int) -> None:
        self._field = field
        self._name = name
        self._scalar = scalar

    @property
    def name(self) -> str:
        return self._name

    def is_precise(self) -> bool:
        return self._field.is_precise()

    @property
    def unit_millis(self) -> int:
        return self._field.unit_millis * self._scalar

    def get_value_as_long(self, duration: int, instant: int) -> int:
        return _trunc_div(
            self._field.get_value_as_long(duration, instant), self._scalar
        )

    def get_millis(self, value: int, instant: int) -> int:
        return self._field.get_millis(value * self._scalar, instant)

    def add(self, instant: int, value: int) -> int:
        return self._field.add(instant, value * self._scalar)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return _trunc_div(
            self._field.get_difference_as_long(minuend, subtrahend),
            self._scalar,
        )


class _LinkedDurationField(DurationField):
    # An imprecise unit whose arithmetic is done by a datetime field,
    # e.g. months by the month-of-year field.

    __slots__ = ("_name", "_unit", "_field")

    def __init__(self, name: str, unit_millis: int, field: DateTimeField) -> None:
        self._name = name
        self._unit = unit_millis
        self._field = field

    @property
    def name(self) -> str:
        return self._name

    def is_precise(self) -> bool:
        return False

    @property
    def unit_millis(self) -> int:
        return self._unit

    def get_value_as_long(self, duration: int, instant: int) -> int:
        return self._field.get_difference_as_long(instant + duration, instant)

    def get_millis(self, value: int, instant: int) -> int:
        return self._field.add(instant, value) - instant

    def add(self, instant: int, value: int) -> int:
        return self._field.add(instant, value)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return self._field.get_difference_as_long(minuend, subtrahend)


class DateTimeField(ABC):
    """Abstract base class for a field of a datetime, such as
    the hour of the day or the month of the year.

    Fields map an instant to a value, and can set, add to, and round
    instants. Most operations have default implementations in terms
    of a few abstract ones.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def name(self) -> str: ...

    def is_supported(self) -> bool:
        return True

    def is_lenient(self) -> bool:
        return False

    @abstractmethod
    def get(self, instant: int) -> int: ...

    def get_as_text(self, instant: int, locale: str | None = None) -> str:
        return self.value_as_text(self.get(instant), locale)

    def get_as_short_text(self, instant: int, locale: str | None = None) -> str:
        return self.value_as_short_text(self.get(instant), locale)

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return str(value)

    def value_as_short_text(self, value: int, locale: str | None = None) -> str:
        return self.value_as_text(value, locale)

    def add(self, instant: int, value: int) -> int:
        return self.duration_field.add(instant, value)

    def add_wrap_field(self, instant: int, value: int) -> int:
        """Add to this field only, wrapping around within its range.

        Example
        -------

        >>> iso = ISOChronology.UTC
        >>> t = iso.get_date_time_millis(2024, 1, 1, hour=22)
        >>> iso.hour_of_day.get(iso.hour_of_day.add_wrap_field(t, 3))
        1
        >>> iso.day_of_month.get(iso.hour_of_day.add_wrap_field(t, 3))
        1

        """
        current = self.get(instant)
        return self.set(
            instant,
            _wrap(
                current + value,
                self.minimum_value(instant),
                self.maximum_value(instant),
            ),
        )

    def get_difference(self, minuend: int, subtrahend: int) -> int:
        return self.duration_field.get_difference(minuend, subtrahend)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return self.duration_field.get_difference_as_long(minuend, subtrahend)

    @abstractmethod
    def set(self, instant: int, value: int) -> int:
        """Set the field to a value, keeping other fields where possible

        Raises
        ------
        InvalidFieldValue
            If the value is out of range
        """

    def set_text(
        self, instant: int, text: str, locale: str | None = None
    ) -> int:
        return self.set(instant, self._text_to_value(text, locale))

    def _text_to_value(self, text: str, locale: str | None) -> int:
        try:
            return int(text)
        except ValueError:
            raise InvalidFieldValue(
                self.name, text, explanation="not a valid value"
            ) from None

    @property
    @abstractmethod
    def duration_field(self) -> DurationField:
        """The unit of the field, e.g. hours for the hour of day"""

    @property
    @abstractmethod
    def range_duration_field(self) -> DurationField | None:
        """The range of the field, e.g. days for the hour of day"""

    @property
    def leap_duration_field(self) -> DurationField | None:
        return None

    def is_leap(self, instant: int) -> bool:
        return False

    def get_leap_amount(self, instant: int) -> int:
        return 0

    @abstractmethod
    def round_floor(self, instant: int) -> int: ...

    def round_ceiling(self, instant: int) -> int:
        floor = self.round_floor(instant)
        return instant if floor == instant else self.add(floor, 1)

    def round_half_floor(self, instant: int) -> int:
        floor = self.round_floor(instant)
        ceiling = self.round_ceiling(instant)
        return ceiling if ceiling - instant < instant - floor else floor

    def round_half_ceiling(self, instant: int) -> int:
        floor = self.round_floor(instant)
        ceiling = self.round_ceiling(instant)
        return floor if instant - floor < ceiling - instant else ceiling

    def round_half_even(self, instant: int) -> int:
        floor = self.round_floor(instant)
        ceiling = self.round_ceiling(instant)
        from_floor = instant - floor
        to_ceiling = ceiling - instant
        if from_floor < to_ceiling:
            return floor
        elif to_ceiling < from_floor:
            return ceiling
        # halfway: round to the even value
        return ceiling if self.get(ceiling) % 2 == 0 else floor

    def remainder(self, instant: int) -> int:
        return instant - self.round_floor(instant)

    @abstractmethod
    def minimum_value(self, instant: int | None = None) -> int: ...

    @abstractmethod
    def maximum_value(self, instant: int | None = None) -> int: ...

    def maximum_text_length(self, locale: str | None = None) -> int:
        return max(
            len(self.value_as_text(v, locale))
            for v in (self.minimum_value(), self.maximum_value())
        )

    def maximum_short_text_length(self, locale: str | None = None) -> int:
        return self.maximum_text_length(locale)

    def __repr__(self) -> str:
        return f"DateTimeField[{self.name}]"


class PreciseDateTimeField(DateTimeField):
    """A field whose unit and range both have fixed lengths,
    such as the minute of the hour.

    Values start at zero.
    """

    __slots__ = ("_name", "_unit", "_range", "_texts")

    def __init__(
        self,
        name: str,
        unit: DurationField,
        range: DurationField,
        texts: tuple[str, ...] | None = None,
    ) -> None:
        self._name = name
        self._unit = unit
        self._range = range
        self._texts = texts

    @property
    def name(self) -> str:
        return self._name

    @property
    def _values(self) -> int:
        return self._range.unit_millis // self._unit.unit_millis

    def get(self, instant: int) -> int:
        return (instant // self._unit.unit_millis) % self._values

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return str(value) if self._texts is None else self._texts[value]

    def _text_to_value(self, text: str, locale: str | None) -> int:
        if self._texts is not None:
            for value, option in enumerate(self._texts):
                if option.lower() == text.strip().lower():
                    return value
        return super()._text_to_value(text, locale)

    def add_wrap_field(self, instant: int, value: int) -> int:
        current = self.get(instant)
        wrapped = (current + value) % self._values
        return instant + (wrapped - current) * self._unit.unit_millis

    def set(self, instant: int, value: int) -> int:
        _verify_bounds(self._name, value, 0, self._values - 1)
        return instant + (value - self.get(instant)) * self._unit.unit_millis

    @property
    def duration_field(self) -> DurationField:
        return self._unit

    @property
    def range_duration_field(self) -> DurationField:
        return self._range

    def round_floor(self, instant: int) -> int:
        return instant - instant % self._unit.unit_millis

    def remainder(self, instant: int) -> int:
        return instant % self._unit.unit_millis

    def minimum_value(self, instant: int | None = None) -> int:
        return 0

    def maximum_value(self, instant: int | None = None) -> int:
        return self._values - 1


class _ZeroIsMaxField(DateTimeField):
    # Presents the zero value of another field as its maximum plus one,
    # like the 24 of a clock hour.

    __slots__ = ("_field", "_name")

    def __init__(self, field: DateTimeField, name: str) -> None:
        self._field = field
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get(self, instant: int) -> int:
        return self._field.get(instant) or self.maximum_value()

    def set(self, instant: int, value: int) -> int:
        _verify_bounds(self._name, value, 1, self.maximum_value())
        return self._field.set(
            instant, 0 if value == self.maximum_value() else value
        )

    def add(self, instant: int, value: int) -> int:
        return self._field.add(instant, value)

    def add_wrap_field(self, instant: int, value: int) -> int:
        return self._field.add_wrap_field(instant, value)

    @property
    def duration_field(self) -> DurationField:
        return self._field.duration_field

    @property
    def range_duration_field(self) -> DurationField | None:
        return self._field.range_duration_field

    def round_floor(self, instant: int) -> int:
        return self._field.round_floor(instant)

    def round_ceiling(self, instant: int) -> int:
        return self._field.round_ceiling(instant)

    def remainder(self, instant: int) -> int:
        return self._field.remainder(instant)

    def minimum_value(self, instant: int | None = None) -> int:
        return 1

    def maximum_value(self, instant: int | None = None) -> int:
        return self._field.maximum_value() + 1


class _DayBasedField(DateTimeField):
    # A calendar field with a precise unit of days or weeks,
    # such as the day of the month.

    __slots__ = ("_unit", "_range")
    _name: ClassVar[str]

    def __init__(self, unit: DurationField, range: DurationField) -> None:
        self._unit = unit
        self._range = range

    @property
    def name(self) -> str:
        return self._name

    def set(self, instant: int, value: int) -> int:
        _verify_bounds(
            self._name,
            value,
            self.minimum_value(instant),
            self.maximum_value(instant),
        )
        return instant + (value - self.get(instant)) * self._unit.unit_millis

    @property
    def duration_field(self) -> DurationField:
        return self._unit

    @property
    def range_duration_field(self) -> DurationField:
        return self._range

    def round_floor(self, instant: int) -> int:
        return instant - instant % self._unit.unit_millis

    def minimum_value(self, instant: int | None = None) -> int:
        return 1


class _DayOfMonthField(_DayBasedField):
    __slots__ = ()
    _name = "day_of_month"

    def get(self, instant: int) -> int:
        return _to_date(instant).day

    def maximum_value(self, instant: int | None = None) -> int:
        if instant is None:
            return 31
        d = _to_date(instant)
        return monthrange(d.year, d.month)[1]


class _DayOfYearField(_DayBasedField):
    __slots__ = ()
    _name = "day_of_year"

    def get(self, instant: int) -> int:
        return _to_date(instant).timetuple().tm_yday

    def maximum_value(self, instant: int | None = None) -> int:
        if instant is None:
            return 366
        return 366 if isleap(_to_date(instant).year) else 365


class _DayOfWeekField(_DayBasedField):
    __slots__ = ()
    _name = "day_of_week"

    def get(self, instant: int) -> int:
        # 1970-01-01 was a Thursday
        return (instant // MILLIS_PER_DAY + 3) % 7 + 1

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return day_name[value - 1]

    def value_as_short_text(self, value: int, locale: str | None = None) -> str:
        return day_abbr[value - 1]

    def _text_to_value(self, text: str, locale: str | None) -> int:
        lowered = text.strip().lower()
        for value in range(1, 8):
            if lowered in (
                day_name[value - 1].lower(),
                day_abbr[value - 1].lower(),
            ):
                return value
        return super()._text_to_value(text, locale)

    def maximum_text_length(self, locale: str | None = None) -> int:
        return max(map(len, day_name))

    def maximum_short_text_length(self, locale: str | None = None) -> int:
        return max(map(len, day_abbr))

    def maximum_value(self, instant: int | None = None) -> int:
        return 7


class _WeekOfWeekyearField(_DayBasedField):
    __slots__ = ()
    _name = "week_of_weekyear"

    def get(self, instant: int) -> int:
        return _to_date(instant).isocalendar()[1]

    def round_floor(self, instant: int) -> int:
        # 1970-01-05 was the first Monday after the epoch
        return instant - (instant - 4 * MILLIS_PER_DAY) % MILLIS_PER_WEEK

    def maximum_value(self, instant: int | None = None) -> int:
        if instant is None:
            return 53
        return _weeks_in(_to_date(instant).isocalendar()[0])


class _YearField(DateTimeField):
    __slots__ = ("_duration", "_leap")

    def __init__(self, leap: DurationField) -> None:
        self._duration = _LinkedDurationField(
            "years", _AVERAGE_MILLIS_PER_YEAR, self
        )
        self._leap = leap

    @property
    def name(self) -> str:
        return "year"

    def get(self, instant: int) -> int:
        return _to_date(instant).year

    def set(self, instant: int, value: int) -> int:
        _verify_bounds("year", value, MINYEAR, MAXYEAR)
        d = _to_date(instant)
        return _from_date(
            d.replace(year=value, day=min(d.day, monthrange(value, d.month)[1])),
            instant % MILLIS_PER_DAY,
        )

    def add(self, instant: int, value: int) -> int:
        return instant if value == 0 else self.set(instant, self.get(instant) + value)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        if minuend < subtrahend:
            return -self.get_difference_as_long(subtrahend, minuend)
        diff = self.get(minuend) - self.get(subtrahend)
        if self.add(subtrahend, diff) > minuend:
            diff -= 1
        return diff

    @property
    def duration_field(self) -> DurationField:
        return self._duration

    @property
    def range_duration_field(self) -> None:
        return None

    @property
    def leap_duration_field(self) -> DurationField:
        return self._leap

    def is_leap(self, instant: int) -> bool:
        return isleap(self.get(instant))

    def get_leap_amount(self, instant: int) -> int:
        return 1 if self.is_leap(instant) else 0

    def round_floor(self, instant: int) -> int:
        return _from_date(_date(self.get(instant), 1, 1), 0)

    def minimum_value(self, instant: int | None = None) -> int:
        return MINYEAR

    def maximum_value(self, instant: int | None = None) -> int:
        return MAXYEAR


class _MonthOfYearField(DateTimeField):
    __slots__ = ("_duration", "_range", "_leap")

    def __init__(self, range: DurationField, leap: DurationField) -> None:
        self._duration = _LinkedDurationField(
            "months", _AVERAGE_MILLIS_PER_MONTH, self
        )
        self._range = range
        self._leap = leap

    @property
    def name(self) -> str:
        return "month_of_year"

    def get(self, instant: int) -> int:
        return _to_date(instant).month

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return month_name[value]

    def value_as_short_text(self, value: int, locale: str | None = None) -> str:
        return month_abbr[value]

    def _text_to_value(self, text: str, locale: str | None) -> int:
        lowered = text.strip().lower()
        for value in range(1, 13):
            if lowered in (month_name[value].lower(), month_abbr[value].lower()):
                return value
        return super()._text_to_value(text, locale)

    def maximum_text_length(self, locale: str | None = None) -> int:
        return max(map(len, month_name))

    def maximum_short_text_length(self, locale: str | None = None) -> int:
        return max(map(len, month_abbr))

    def set(self, instant: int, value: int) -> int:
        _verify_bounds("month_of_year", value, 1, 12)
        d = _to_date(instant)
        return _from_date(
            d.replace(month=value, day=min(d.day, monthrange(d.year, value)[1])),
            instant % MILLIS_PER_DAY,
        )

    def add(self, instant: int, value: int) -> int:
        if value == 0:
            return instant
        d = _to_date(instant)
        year_overflow, month_new = divmod(d.month - 1 + value, 12)
        month_new += 1
        year_new = d.year + year_overflow
        _verify_bounds("year", year_new, MINYEAR, MAXYEAR)
        return _from_date(
            _date(
                year_new,
                month_new,
                min(d.day, monthrange(year_new, month_new)[1]),
            ),
            instant % MILLIS_PER_DAY,
        )

    def add_wrap_field(self, instant: int, value: int) -> int:
        return self.set(instant, _wrap(self.get(instant) + value, 1, 12))

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        if minuend < subtrahend:
            return -self.get_difference_as_long(subtrahend, minuend)
        m, s = _to_date(minuend), _to_date(subtrahend)
        diff = (m.year - s.year) * 12 + m.month - s.month
        if self.add(subtrahend, diff) > minuend:
            diff -= 1
        return diff

    @property
    def duration_field(self) -> DurationField:
        return self._duration

    @property
    def range_duration_field(self) -> DurationField:
        return self._range

    @property
    def leap_duration_field(self) -> DurationField:
        return self._leap

    def is_leap(self, instant: int) -> bool:
        d = _to_date(instant)
        return d.month == 2 and isleap(d.year)

    def get_leap_amount(self, instant: int) -> int:
        return 1 if self.is_leap(instant) else 0

    def round_floor(self, instant: int) -> int:
        return _from_date(_to_date(instant).replace(day=1), 0)

    def minimum_value(self, instant: int | None = None) -> int:
        return 1

    def maximum_value(self, instant: int | None = None) -> int:
        return 12


class _WeekyearField(DateTimeField):
    """The year of the ISO week date, which starts on the Monday
    of the week containing January 4th."""

    __slots__ = ("_duration", "_leap")

    def __init__(self, leap: DurationField) -> None:
        self._duration = _LinkedDurationField(
            "weekyears", _AVERAGE_MILLIS_PER_YEAR, self
        )
        self._leap = leap

    @property
    def name(self) -> str:
        return "weekyear"

    def get(self, instant: int) -> int:
        return _to_date(instant).isocalendar()[0]

    def set(self, instant: int, value: int) -> int:
        _verify_bounds("weekyear", value, MINYEAR, MAXYEAR)
        _, week, weekday = _to_date(instant).isocalendar()
        return _from_date(
            _date.fromisocalendar(value, min(week, _weeks_in(value)), weekday),
            instant % MILLIS_PER_DAY,
        )

    def add(self, instant: int, value: int) -> int:
        return instant if value == 0 else self.set(instant, self.get(instant) + value)

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        if minuend < subtrahend:
            return -self.get_difference_as_long(subtrahend, minuend)
        diff = self.get(minuend) - self.get(subtrahend)
        if self.add(subtrahend, diff) > minuend:
            diff -= 1
        return diff

    @property
    def duration_field(self) -> DurationField:
        return self._duration

    @property
    def range_duration_field(self) -> None:
        return None

    @property
    def leap_duration_field(self) -> DurationField:
        return self._leap

    def is_leap(self, instant: int) -> bool:
        return _weeks_in(self.get(instant)) == 53

    def get_leap_amount(self, instant: int) -> int:
        return 1 if self.is_leap(instant) else 0

    def round_floor(self, instant: int) -> int:
        return _from_date(_date.fromisocalendar(self.get(instant), 1, 1), 0)

    def minimum_value(self, instant: int | None = None) -> int:
        return MINYEAR

    def maximum_value(self, instant: int | None = None) -> int:
        return MAXYEAR


class _YearOfEraField(DateTimeField):
    __slots__ = ("_year", "_range")

    def __init__(self, year: DateTimeField, range: DurationField) -> None:
        self._year = year
        self._range = range

    @property
    def name(self) -> str:
        return "year_of_era"

    def get(self, instant: int) -> int:
        year = self._year.get(instant)
        return year if year > 0 else 1 - year

    def set(self, instant: int, value: int) -> int:
        _verify_bounds("year_of_era", value, 1, MAXYEAR)
        return self._year.set(instant, value)

    def add(self, instant: int, value: int) -> int:
        return self._year.add(instant, value)

    @property
    def duration_field(self) -> DurationField:
        return self._year.duration_field

    @property
    def range_duration_field(self) -> DurationField:
        return self._range

    def is_leap(self, instant: int) -> bool:
        return self._year.is_leap(instant)

    def get_leap_amount(self, instant: int) -> int:
        return self._year.get_leap_amount(instant)

    @property
    def leap_duration_field(self) -> DurationField | None:
        return self._year.leap_duration_field

    def round_floor(self, instant: int) -> int:
        return self._year.round_floor(instant)

    def minimum_value(self, instant: int | None = None) -> int:
        return 1

    def maximum_value(self, instant: int | None = None) -> int:
        return MAXYEAR


class _EraField(DateTimeField):
    __slots__ = ("_year", "_duration")

    _TEXTS = ("BC", "AD")

    def __init__(self, year: DateTimeField, duration: DurationField) -> None:
        self._year = year
        self._duration = duration

    @property
    def name(self) -> str:
        return "era"

    def get(self, instant: int) -> int:
        return 1 if self._year.get(instant) > 0 else 0

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return self._TEXTS[value]

    def _text_to_value(self, text: str, locale: str | None) -> int:
        try:
            return self._TEXTS.index(text.strip().upper())
        except ValueError:
            return super()._text_to_value(text, locale)

    def set(self, instant: int, value: int) -> int:
        _verify_bounds("era", value, 0, 1)
        if value == self.get(instant):
            return instant
        return self._year.set(instant, 1 - self._year.get(instant))

    @property
    def duration_field(self) -> DurationField:
        return self._duration

    @property
    def range_duration_field(self) -> None:
        return None

    def round_floor(self, instant: int) -> int:
        if self.get(instant) == 1:
            return _from_date(_date(1, 1, 1), 0)
        return MIN_INSTANT

    def round_ceiling(self, instant: int) -> int:
        if self.get(instant) == 0:
            return _from_date(_date(1, 1, 1), 0)
        return MAX_INSTANT

    def minimum_value(self, instant: int | None = None) -> int:
        return 0

    def maximum_value(self, instant: int | None = None) -> int:
        return 1


class _DividedField(DateTimeField):
    # The value of another field divided by a constant,
    # e.g. the century of the year of era.

    __slots__ = ("_field", "_name", "_divisor", "_duration", "_range")

    def __init__(
        self,
        field: DateTimeField,
        name: str,
        divisor: int,
        duration: DurationField,
        range: DurationField | None,
    ) -> None:
        self._field = field
        self._name = name
        self._divisor = divisor
        self._duration = duration
        self._range = range

    @property
    def name(self) -> str:
        return self._name

    def get(self, instant: int) -> int:
        return self._field.get(instant) // self._divisor

    def set(self, instant: int, value: int) -> int:
        _verify_bounds(self._name, value, 0, self.maximum_value())
        rest = self._field.get(instant) % self._divisor
        return self._field.set(instant, value * self._divisor + rest)

    def add(self, instant: int, value: int) -> int:
        return self._field.add(instant, value * self._divisor)

    @property
    def duration_field(self) -> DurationField:
        return self._duration

    @property
    def range_duration_field(self) -> DurationField | None:
        return self._range

    def round_floor(self, instant: int) -> int:
        return self._field.round_floor(
            self._field.set(instant, max(self.get(instant) * self._divisor, 1))
        )

    def minimum_value(self, instant: int | None = None) -> int:
        return 0

    def maximum_value(self, instant: int | None = None) -> int:
        return self._field.maximum_value() // self._divisor


class _RemainderField(DateTimeField):
    # The remainder of another field divided by a constant,
    # e.g. the year of the century.

    __slots__ = ("_field", "_name", "_divisor", "_range")

    def __init__(
        self,
        field: DateTimeField,
        name: str,
        divisor: int,
        range: DurationField,
    ) -> None:
        self._field = field
        self._name = name
        self._divisor = divisor
        self._range = range

    @property
    def name(self) -> str:
        return self._name

    def get(self, instant: int) -> int:
        return self._field.get(instant) % self._divisor

    def set(self, instant: int, value: int) -> int:
        _verify_bounds(self._name, value, 0, self._divisor - 1)
        return self._field.set(
            instant, self._field.get(instant) - self.get(instant) + value
        )

    def add(self, instant: int, value: int) -> int:
        return self._field.add(instant, value)

    @property
    def duration_field(self) -> DurationField:
        return self._field.duration_field

    @property
    def range_duration_field(self) -> DurationField:
        return self._range

    def round_floor(self, instant: int) -> int:
        return self._field.round_floor(instant)

    def minimum_value(self, instant: int | None = None) -> int:
        return 0

    def maximum_value(self, instant: int | None = None) -> int:
        return self._divisor - 1


def _to_date(instant: int) -> _date:
    try:
        return _date.fromordinal(instant // MILLIS_PER_DAY + _EPOCH_ORDINAL)
    except (ValueError, OverflowError):
        raise ValueError(
            f"Instant out of range of the calendar: {instant}"
        ) from None


def _from_date(d: _date, millis_of_day: int) -> int:
    return (d.toordinal() - _EPOCH_ORDINAL) * MILLIS_PER_DAY + millis_of_day


def _weeks_in(weekyear: int) -> int:
    # December 28th is always in the last week of its weekyear
    return _date(weekyear, 12, 28).isocalendar()[1]


# ---------------------------------------------------------------------------
# Chronologies
# ---------------------------------------------------------------------------

_DURATION_FIELD_NAMES = (
    "eras",
    "centuries",
    "years",
    "months",
    "weekyears",
    "weeks",
    "days",
    "halfdays",
    "hours",
    "minutes",
    "seconds",
    "millis",
)
_DATETIME_FIELD_NAMES = (
    "year",
    "year_of_era",
    "year_of_century",
    "century_of_era",
    "era",
    "day_of_week",
    "day_of_month",
    "day_of_year",
    "month_of_year",
    "week_of_weekyear",
    "weekyear",
    "weekyear_of_century",
    "millis_of_second",
    "millis_of_day",
    "second_of_minute",
    "second_of_day",
    "minute_of_hour",
    "minute_of_day",
    "hour_of_day",
    "hour_of_halfday",
    "clockhour_of_day",
    "clockhour_of_halfday",
    "halfday_of_day",
)
_FIELD_NAMES = _DURATION_FIELD_NAMES + _DATETIME_FIELD_NAMES

_Field = Union[DurationField, DateTimeField]


class Fields:
    """The field table of a chronology while it is being assembled.

    Each attribute holds one field, or ``None`` if the calendar
    system doesn't have it.
    """

    __slots__ = _FIELD_NAMES

    def __init__(self) -> None:
        for name in _FIELD_NAMES:
            setattr(self, name, None)

    def copy_from(self, chrono: Chronology) -> None:
        for name in _FIELD_NAMES:
            setattr(self, name, getattr(chrono, name))


class Chronology(ABC):
    """Abstract base class for calendar systems.

    A chronology is a table of fields (e.g. ``hour_of_day``) and
    durations (e.g. ``days``) operating on millisecond instants.
    The table is assembled once, on construction, and never changes.
    """

    __slots__ = ("_base", "_fields", "__weakref__")

    if TYPE_CHECKING:
        eras: DurationField
        centuries: DurationField
        years: DurationField
        months: DurationField
        weekyears: DurationField
        weeks: DurationField
        days: DurationField
        halfdays: DurationField
        hours: DurationField
        minutes: DurationField
        seconds: DurationField
        millis: DurationField
        year: DateTimeField
        year_of_era: DateTimeField
        year_of_century: DateTimeField
        century_of_era: DateTimeField
        era: DateTimeField
        day_of_week: DateTimeField
        day_of_month: DateTimeField
        day_of_year: DateTimeField
        month_of_year: DateTimeField
        week_of_weekyear: DateTimeField
        weekyear: DateTimeField
        weekyear_of_century: DateTimeField
        millis_of_second: DateTimeField
        millis_of_day: DateTimeField
        second_of_minute: DateTimeField
        second_of_day: DateTimeField
        minute_of_hour: DateTimeField
        minute_of_day: DateTimeField
        hour_of_day: DateTimeField
        hour_of_halfday: DateTimeField
        clockhour_of_day: DateTimeField
        clockhour_of_halfday: DateTimeField
        halfday_of_day: DateTimeField

    def __init__(self, base: Chronology | None) -> None:
        self._base = base
        fields = Fields()
        if base is not None:
            fields.copy_from(base)
        self._assemble(fields)
        self._fields = fields

    @abstractmethod
    def _assemble(self, fields: Fields) -> None:
        """Fill in or replace the fields of the table"""

    def fields(self) -> dict[str, _Field | None]:
        """All fields and durations of the chronology, by name"""
        return {name: getattr(self._fields, name) for name in _FIELD_NAMES}

    @property
    @abstractmethod
    def zone(self) -> TimeZone: ...

    @abstractmethod
    def with_utc(self) -> Chronology:
        """The same calendar system, in UTC"""

    @abstractmethod
    def with_zone(self, zone: TimeZone, /) -> Chronology:
        """The same calendar system, in another timezone"""

    @abstractmethod
    def get_date_millis(
        self, year: int, month: int, day: int, millis_of_day: int
    ) -> int:
        """The instant of a date and a time of day in milliseconds"""

    @abstractmethod
    def get_date_time_millis(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> int:
        """The instant of a date and time"""

    @abstractmethod
    def with_time_millis(
        self,
        instant: int,
        hour: int,
        minute: int,
        second: int,
        millisecond: int,
    ) -> int:
        """The instant on the same date as the given one,
        at a different time of day"""

    # We don't need to copy, because it's immutable
    def __copy__(self) -> Chronology:
        return self

    def __deepcopy__(self, _: object) -> Chronology:
        return self


# Defining properties this way is faster than declaring a `def`,
# but the type checker doesn't like it.
for _name in _FIELD_NAMES:
    setattr(Chronology, _name, property(attrgetter(f"_fields.{_name}")))
del _name


class ISOChronology(Chronology):
    """The ISO-8601 calendar system in UTC: the proleptic Gregorian
    calendar with ISO week dates.

    Dates are supported from year 1 to year 9999.
    Use :meth:`with_zone` to obtain the chronology in a timezone.

    Example
    -------

    >>> iso = ISOChronology.UTC
    >>> t = iso.get_date_time_millis(2024, 2, 29, 13, 45)
    >>> iso.day_of_week.get_as_text(t)
    'Thursday'
    >>> iso.year.get(iso.years.add(t, 1))
    2025

    """

    __slots__ = ()

    UTC: ClassVar[ISOChronology]

    def __init__(self) -> None:
        super().__init__(None)

    def _assemble(self, fields: Fields) -> None:
        fields.millis = PreciseDurationField("millis", 1)
        fields.seconds = PreciseDurationField("seconds", MILLIS_PER_SECOND)
        fields.minutes = PreciseDurationField("minutes", MILLIS_PER_MINUTE)
        fields.hours = PreciseDurationField("hours", MILLIS_PER_HOUR)
        fields.halfdays = PreciseDurationField("halfdays", MILLIS_PER_HALFDAY)
        fields.days = PreciseDurationField("days", MILLIS_PER_DAY)
        fields.weeks = PreciseDurationField("weeks", MILLIS_PER_WEEK)

        fields.millis_of_second = PreciseDateTimeField(
            "millis_of_second", fields.millis, fields.seconds
        )
        fields.millis_of_day = PreciseDateTimeField(
            "millis_of_day", fields.millis, fields.days
        )
        fields.second_of_minute = PreciseDateTimeField(
            "second_of_minute", fields.seconds, fields.minutes
        )
        fields.second_of_day = PreciseDateTimeField(
            "second_of_day", fields.seconds, fields.days
        )
        fields.minute_of_hour = PreciseDateTimeField(
            "minute_of_hour", fields.minutes, fields.hours
        )
        fields.minute_of_day = PreciseDateTimeField(
            "minute_of_day", fields.minutes, fields.days
        )
        fields.hour_of_day = PreciseDateTimeField(
            "hour_of_day", fields.hours, fields.days
        )
        fields.hour_of_halfday = PreciseDateTimeField(
            "hour_of_halfday", fields.hours, fields.halfdays
        )
        fields.halfday_of_day = PreciseDateTimeField(
            "halfday_of_day", fields.halfdays, fields.days, ("AM", "PM")
        )
        fields.clockhour_of_day = _ZeroIsMaxField(
            fields.hour_of_day, "clockhour_of_day"
        )
        fields.clockhour_of_halfday = _ZeroIsMaxField(
            fields.hour_of_halfday, "clockhour_of_halfday"
        )

        fields.year = _YearField(leap=fields.days)
        fields.years = fields.year.duration_field
        fields.eras = UnsupportedDurationField("eras")
        fields.centuries = ScaledDurationField(fields.years, "centuries", 100)
        fields.month_of_year = _MonthOfYearField(
            range=fields.years, leap=fields.days
        )
        fields.months = fields.month_of_year.duration_field
        fields.weekyear = _WeekyearField(leap=fields.weeks)
        fields.weekyears = fields.weekyear.duration_field

        fields.day_of_month = _DayOfMonthField(fields.days, fields.months)
        fields.day_of_year = _DayOfYearField(fields.days, fields.years)
        fields.day_of_week = _DayOfWeekField(fields.days, fields.weeks)
        fields.week_of_weekyear = _WeekOfWeekyearField(
            fields.weeks, fields.weekyears
        )

        fields.year_of_era = _YearOfEraField(fields.year, fields.eras)
        fields.era = _EraField(fields.year, fields.eras)
        fields.century_of_era = _DividedField(
            fields.year_of_era,
            "century_of_era",
            100,
            fields.centuries,
            fields.eras,
        )
        fields.year_of_century = _RemainderField(
            fields.year_of_era, "year_of_century", 100, fields.centuries
        )
        fields.weekyear_of_century = _RemainderField(
            fields.weekyear, "weekyear_of_century", 100, fields.centuries
        )

    @property
    def zone(self) -> TimeZone:
        return UTC

    def with_utc(self) -> ISOChronology:
        return self

    def with_zone(self, zone: TimeZone, /) -> Chronology:
        if zone == UTC:
            return self
        return ZonedChronology(self, zone)

    def get_date_millis(
        self, year: int, month: int, day: int, millis_of_day: int
    ) -> int:
        _verify_bounds("year", year, MINYEAR, MAXYEAR)
        _verify_bounds("month_of_year", month, 1, 12)
        _verify_bounds("day_of_month", day, 1, monthrange(year, month)[1])
        _verify_bounds("millis_of_day", millis_of_day, 0, MILLIS_PER_DAY - 1)
        return _from_date(_date(year, month, day), millis_of_day)

    def get_date_time_millis(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> int:
        return self.get_date_millis(
            year, month, day, _millis_of_day(hour, minute, second, millisecond)
        )

    def with_time_millis(
        self,
        instant: int,
        hour: int,
        minute: int,
        second: int,
        millisecond: int,
    ) -> int:
        return (
            instant
            - instant % MILLIS_PER_DAY
            + _millis_of_day(hour, minute, second, millisecond)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chronology):
            return NotImplemented
        return isinstance(other, ISOChronology)

    def __hash__(self) -> int:
        return hash(ISOChronology)

    def __repr__(self) -> str:
        return "ISOChronology[UTC]"

    def __reduce__(self) -> tuple[object, ...]:
        return (_unpkl_iso, ())


# A separate function is needed for unpickling, so that
# all unpickled instances are the shared UTC instance.
def _unpkl_iso() -> ISOChronology:
    return ISOChronology.UTC


def _millis_of_day(hour: int, minute: int, second: int, millisecond: int) -> int:
    _verify_bounds("hour_of_day", hour, 0, 23)
    _verify_bounds("minute_of_hour", minute, 0, 59)
    _verify_bounds("second_of_minute", second, 0, 59)
    _verify_bounds("millis_of_second", millisecond, 0, 999)
    return (
        hour * MILLIS_PER_HOUR
        + minute * MILLIS_PER_MINUTE
        + second * MILLIS_PER_SECOND
        + millisecond
    )


class ZonedChronology(Chronology):
    """A chronology which wraps another to add support for a timezone.

    All fields take and return UTC instants, but do their
    work in the local time of the zone.

    Example
    -------

    >>> ams = ZonedChronology(ISOChronology.UTC, IANAZone("Europe/Amsterdam"))
    >>> t = ams.get_date_time_millis(2023, 10, 28, 12)
    >>> # adding hours accounts for the DST transition
    >>> ams.hour_of_day.get(ams.hours.add(t, 24))
    11
    >>> # adding days keeps the same local time
    >>> ams.hour_of_day.get(ams.days.add(t, 1))
    12

    Note
    ----
    Units shorter than 12 hours are added by keeping the offset
    constant, so adding an hour always adds 60 minutes of elapsed
    time. Longer units are added in local time, after which the
    offset is determined anew. Applied to time fields, this would
    nullify or reverse additions across a transition.
    """

    __slots__ = ("_zone",)

    def __init__(self, base: Chronology, zone: TimeZone) -> None:
        if base is None:
            raise ValueError("Must supply a chronology")
        base = base.with_utc()
        if base is None:
            raise ValueError("UTC chronology must not be None")
        if zone is None:
            raise ValueError("Must supply a timezone")
        self._zone = zone
        super().__init__(base)

    @property
    def zone(self) -> TimeZone:
        return self._zone

    def with_utc(self) -> Chronology:
        assert self._base is not None
        return self._base

    def with_zone(self, zone: TimeZone, /) -> Chronology:
        assert self._base is not None
        if zone == self._zone:
            return self
        elif zone == UTC:
            return self._base
        return ZonedChronology(self._base, zone)

    def get_date_millis(
        self, year: int, month: int, day: int, millis_of_day: int
    ) -> int:
        assert self._base is not None
        return self.local_to_utc(
            self._base.get_date_millis(year, month, day, millis_of_day)
        )

    def get_date_time_millis(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> int:
        assert self._base is not None
        return self.local_to_utc(
            self._base.get_date_time_millis(
                year, month, day, hour, minute, second, millisecond
            )
        )

    def with_time_millis(
        self,
        instant: int,
        hour: int,
        minute: int,
        second: int,
        millisecond: int,
    ) -> int:
        assert self._base is not None
        return self.local_to_utc(
            self._base.with_time_millis(
                self._zone.utc_to_local(instant),
                hour,
                minute,
                second,
                millisecond,
            )
        )

    def local_to_utc(self, local_instant: int, /) -> int:
        """Convert a local instant to UTC, refusing to guess
        for local times skipped by a transition.

        The bounds of the timeline stand for "unbounded", and
        are returned unchanged.

        Raises
        ------
        InvalidLocalInstant
            If the local instant doesn't exist in the zone
        """
        if local_instant == MAX_INSTANT:
            return MAX_INSTANT
        elif local_instant == MIN_INSTANT:
            return MIN_INSTANT
        zone = self._zone
        offset = zone.offset_from_local(local_instant)
        utc = local_instant - offset
        if local_instant > _NEAR_ZERO and (utc < 0 or utc > MAX_INSTANT):
            return MAX_INSTANT
        elif local_instant < -_NEAR_ZERO and (utc > 0 or utc < MIN_INSTANT):
            return MIN_INSTANT
        if zone.offset_at(utc) != offset:
            raise InvalidLocalInstant(local_instant, zone.id)
        return utc

    def _assemble(self, fields: Fields) -> None:
        # Converted fields, by the identity of the field they wrap.
        # Durations go first: datetime fields need them already converted.
        converted: dict[int, _Field] = {}
        for name in _DURATION_FIELD_NAMES:
            setattr(
                fields,
                name,
                self._convert_duration(getattr(fields, name), converted),
            )
        for name in _DATETIME_FIELD_NAMES:
            setattr(
                fields,
                name,
                self._convert_datetime(getattr(fields, name), converted),
            )

    def _convert_duration(
        self, field: DurationField | None, converted: dict[int, _Field]
    ) -> DurationField | None:
        if field is None or not field.is_supported():
            return field
        if (found := converted.get(id(field))) is not None:
            return found  # type: ignore[return-value]
        zoned = converted[id(field)] = ZonedDurationField(field, self._zone)
        return zoned

    def _convert_datetime(
        self, field: DateTimeField | None, converted: dict[int, _Field]
    ) -> DateTimeField | None:
        if field is None or not field.is_supported():
            return field
        if (found := converted.get(id(field))) is not None:
            return found  # type: ignore[return-value]
        zoned = converted[id(field)] = ZonedDateTimeField(
            field,
            self._zone,
            self._convert_duration(field.duration_field, converted),
            self._convert_duration(field.range_duration_field, converted),
            self._convert_duration(field.leap_duration_field, converted),
        )
        return zoned

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chronology):
            return NotImplemented
        return (
            isinstance(other, ZonedChronology)
            and self._base == other._base
            and self._zone == other._zone
        )

    def __hash__(self) -> int:
        return hash((self._base, self._zone))

    def __repr__(self) -> str:
        return f"ZonedChronology[{self._base!r}, {self._zone.id}]"

    def __reduce__(self) -> tuple[object, ...]:
        return (ZonedChronology, (self._base, self._zone))


# The arithmetic strategies of the zoned fields. Each applies an
# operation of the wrapped field to a UTC instant.


def _keep_offset(
    zone: TimeZone, op: Callable[..., int], instant: int, *args: int
) -> int:
    offset = _offset_to_add(zone, instant)
    return _subtract_offset_checked(op(instant + offset, *args), offset)


def _recompute_offset(
    zone: TimeZone, op: Callable[..., int], instant: int, *args: int
) -> int:
    local = op(instant + _offset_to_add(zone, instant), *args)
    return local - _offset_to_subtract(zone, local)


def _through_local(
    zone: TimeZone, op: Callable[..., int], instant: int, *args: int
) -> int:
    local = op(zone.utc_to_local(instant), *args)
    return zone.local_to_utc(local, False, instant)


def _offset_to_add(zone: TimeZone, instant: int) -> int:
    offset = zone.offset_at(instant)
    _add_offset_checked(instant, offset)
    return offset


def _offset_to_subtract(zone: TimeZone, local_instant: int) -> int:
    offset = zone.offset_from_local(local_instant)
    _subtract_offset_checked(local_instant, offset)
    return offset


def _uses_time_arithmetic(field: DurationField | None) -> bool:
    return field is not None and field.unit_millis < _TIME_UNIT_THRESHOLD


class ZonedDurationField(DurationField):
    """A duration field which adds in the local time of a timezone.

    Time units (shorter than 12 hours) keep the offset of the start
    instant. Date units recompute the offset from the local result.
    """

    __slots__ = ("_field", "_zone", "_time_field", "_arithmetic")

    def __init__(self, field: DurationField, zone: TimeZone) -> None:
        if not field.is_supported():
            raise ValueError(f"Can't wrap unsupported field: {field.name}")
        self._field = field
        self._zone = zone
        self._time_field = _uses_time_arithmetic(field)
        self._arithmetic = (
            _keep_offset if self._time_field else _recompute_offset
        )

    @property
    def name(self) -> str:
        return self._field.name

    @property
    def is_time_unit(self) -> bool:
        return self._time_field

    def is_precise(self) -> bool:
        # a DST transition makes a day 23 or 25 hours long
        return self._field.is_precise() and (
            self._time_field or self._zone.is_fixed()
        )

    @property
    def unit_millis(self) -> int:
        return self._field.unit_millis

    def get_value(self, duration: int, instant: int) -> int:
        return self._field.get_value(duration, self._zone.utc_to_local(instant))

    def get_value_as_long(self, duration: int, instant: int) -> int:
        return self._field.get_value_as_long(
            duration, self._zone.utc_to_local(instant)
        )

    def get_millis(self, value: int, instant: int) -> int:
        return self._field.get_millis(value, self._zone.utc_to_local(instant))

    def add(self, instant: int, value: int) -> int:
        return self._arithmetic(self._zone, self._field.add, instant, value)

    def get_difference(self, minuend: int, subtrahend: int) -> int:
        return self._field.get_difference(*self._to_local(minuend, subtrahend))

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return self._field.get_difference_as_long(
            *self._to_local(minuend, subtrahend)
        )

    def _to_local(self, minuend: int, subtrahend: int) -> tuple[int, int]:
        offset = _offset_to_add(self._zone, subtrahend)
        return (
            minuend
            + (offset if self._time_field else _offset_to_add(self._zone, minuend)),
            subtrahend + offset,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZonedDurationField):
            return NotImplemented
        return self._field == other._field and self._zone == other._zone

    def __hash__(self) -> int:
        return hash((self._field, self._zone))


class ZonedDateTimeField(DateTimeField):
    """A datetime field which operates in the local time of a timezone.

    Instants are converted to local time on the way in,
    and back to UTC on the way out.
    The duration fields are given already wrapped, so that fields
    sharing a duration keep sharing it.
    """

    __slots__ = (
        "_field",
        "_zone",
        "_duration_field",
        "_range_duration_field",
        "_leap_duration_field",
        "_time_field",
        "_arithmetic",
    )

    def __init__(
        self,
        field: DateTimeField,
        zone: TimeZone,
        duration_field: DurationField,
        range_duration_field: DurationField | None,
        leap_duration_field: DurationField | None,
    ) -> None:
        if not field.is_supported():
            raise ValueError(f"Can't wrap unsupported field: {field.name}")
        self._field = field
        self._zone = zone
        self._duration_field = duration_field
        self._range_duration_field = range_duration_field
        self._leap_duration_field = leap_duration_field
        self._time_field = _uses_time_arithmetic(duration_field)
        self._arithmetic = _keep_offset if self._time_field else _through_local

    @property
    def name(self) -> str:
        return self._field.name

    @property
    def is_time_unit(self) -> bool:
        return self._time_field

    def is_lenient(self) -> bool:
        return self._field.is_lenient()

    def get(self, instant: int) -> int:
        return self._field.get(self._zone.utc_to_local(instant))

    def get_as_text(self, instant: int, locale: str | None = None) -> str:
        return self._field.get_as_text(self._zone.utc_to_local(instant), locale)

    def get_as_short_text(self, instant: int, locale: str | None = None) -> str:
        return self._field.get_as_short_text(
            self._zone.utc_to_local(instant), locale
        )

    def value_as_text(self, value: int, locale: str | None = None) -> str:
        return self._field.value_as_text(value, locale)

    def value_as_short_text(self, value: int, locale: str | None = None) -> str:
        return self._field.value_as_short_text(value, locale)

    def add(self, instant: int, value: int) -> int:
        return self._arithmetic(self._zone, self._field.add, instant, value)

    def add_wrap_field(self, instant: int, value: int) -> int:
        return self._arithmetic(
            self._zone, self._field.add_wrap_field, instant, value
        )

    def set(self, instant: int, value: int) -> int:
        local = self._field.set(self._zone.utc_to_local(instant), value)
        result = self._zone.local_to_utc(local, False, instant)
        # The local time may have been pushed out of a gap
        if self.get(result) != value:
            cause = InvalidLocalInstant(local, self._zone.id)
            raise InvalidFieldValue(
                self._field.name, value, explanation=str(cause)
            ) from cause
        return result

    def set_text(
        self, instant: int, text: str, locale: str | None = None
    ) -> int:
        # the result isn't verified, since parsing the text may be lenient
        local = self._field.set_text(
            self._zone.utc_to_local(instant), text, locale
        )
        return self._zone.local_to_utc(local, False, instant)

    def get_difference(self, minuend: int, subtrahend: int) -> int:
        return self._field.get_difference(*self._to_local(minuend, subtrahend))

    def get_difference_as_long(self, minuend: int, subtrahend: int) -> int:
        return self._field.get_difference_as_long(
            *self._to_local(minuend, subtrahend)
        )

    def _to_local(self, minuend: int, subtrahend: int) -> tuple[int, int]:
        offset = _offset_to_add(self._zone, subtrahend)
        return (
            minuend
            + (offset if self._time_field else _offset_to_add(self._zone, minuend)),
            subtrahend + offset,
        )

    @property
    def duration_field(self) -> DurationField:
        return self._duration_field

    @property
    def range_duration_field(self) -> DurationField | None:
        return self._range_duration_field

    @property
    def leap_duration_field(self) -> DurationField | None:
        return self._leap_duration_field

    def is_leap(self, instant: int) -> bool:
        return self._field.is_leap(self._zone.utc_to_local(instant))

    def get_leap_amount(self, instant: int) -> int:
        return self._field.get_leap_amount(self._zone.utc_to_local(instant))

    def round_floor(self, instant: int) -> int:
        return self._arithmetic(self._zone, self._field.round_floor, instant)

    def round_ceiling(self, instant: int) -> int:
        return self._arithmetic(self._zone, self._field.round_ceiling, instant)

    def remainder(self, instant: int) -> int:
        return self._field.remainder(self._zone.utc_to_local(instant))

    def minimum_value(self, instant: int | None = None) -> int:
        if instant is None:
            return self._field.minimum_value()
        return self._field.minimum_value(self._zone.utc_to_local(instant))

    def maximum_value(self, instant: int | None = None) -> int:
        if instant is None:
            return self._field.maximum_value()
        return self._field.maximum_value(self._zone.utc_to_local(instant))

    def maximum_text_length(self, locale: str | None = None) -> int:
        return self._field.maximum_text_length(locale)

    def maximum_short_text_length(self, locale: str | None = None) -> int:
        return self._field.maximum_short_text_length(locale)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZonedDateTimeField):
            return NotImplemented
        # The leap duration field is left out
        return (
            self._field == other._field
            and self._zone == other._zone
            and self._duration_field == other._duration_field
            and self._range_duration_field == other._range_duration_field
        )

    def __hash__(self) -> int:
        return hash((self._field, self._zone))


# Helpers that pre-compute/lookup as much as possible
_UTC = _timezone.utc
_ONE_MILLI = _timedelta(milliseconds=1)
_EPOCH = _datetime(1970, 1, 1)
_EPOCH_ORDINAL = _EPOCH.toordinal()
# The standard library's datetime range, with a margin for offsets
_PY_MIN_INSTANT = (_datetime(1, 1, 2) - _EPOCH) // _ONE_MILLI
_PY_MAX_INSTANT = (_datetime(9999, 12, 30) - _EPOCH) // _ONE_MILLI

ISOChronology.UTC = ISOChronology()
