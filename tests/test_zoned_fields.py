import pytest
from hypothesis import assume, given
from hypothesis.strategies import integers, sampled_from

from zonedchrono import (
    MAX_INSTANT,
    MILLIS_PER_HOUR,
    MILLIS_PER_MINUTE,
    MIN_INSTANT,
    ArithmeticOverflow,
    FixedOffsetZone,
    IANAZone,
    InvalidFieldValue,
    InvalidLocalInstant,
    ISOChronology,
    ZonedChronology,
    ZonedDateTimeField,
    ZonedDurationField,
)

from .common import AlwaysEqual, NeverEqual, utc_ms

ISO = ISOChronology.UTC
AMS = IANAZone("Europe/Amsterdam")
AMS_CHRONO = ZonedChronology(ISO, AMS)
INDIA = FixedOffsetZone(5 * MILLIS_PER_HOUR + 30 * MILLIS_PER_MINUTE)
INDIA_CHRONO = ZonedChronology(ISO, INDIA)

# Amsterdam in 2023: summer time from March 26th 01:00Z
# until October 29th 01:00Z
BEFORE_GAP = utc_ms(2023, 3, 26, 0, 30)  # 01:30 local
AFTER_GAP = utc_ms(2023, 3, 26, 1, 30)  # 03:30 local


class TestDurationField:
    def test_time_unit_keeps_offset(self):
        assert AMS_CHRONO.hours.add(BEFORE_GAP, 1) == AFTER_GAP
        assert AMS_CHRONO.minutes.add(BEFORE_GAP, 60) == AFTER_GAP
        assert AMS_CHRONO.hours.add(AFTER_GAP, -1) == BEFORE_GAP

    def test_date_unit_keeps_local_time(self):
        assert AMS_CHRONO.days.add(utc_ms(2023, 3, 25, 11), 1) == utc_ms(
            2023, 3, 26, 10
        )
        assert AMS_CHRONO.days.add(utc_ms(2023, 10, 28, 10), 1) == utc_ms(
            2023, 10, 29, 11
        )
        assert AMS_CHRONO.months.add(utc_ms(2023, 2, 26, 11), 1) == utc_ms(
            2023, 3, 26, 10
        )
        assert AMS_CHRONO.days.subtract(utc_ms(2023, 3, 26, 10), 1) == (
            utc_ms(2023, 3, 25, 11)
        )

    def test_date_unit_into_gap(self):
        # local 02:30 doesn't exist on the 26th
        result = AMS_CHRONO.days.add(utc_ms(2023, 3, 25, 1, 30), 1)
        assert result == utc_ms(2023, 3, 26, 1, 30)

    def test_difference(self):
        start = utc_ms(2023, 3, 25, 23)  # midnight local
        end = utc_ms(2023, 3, 26, 22)  # midnight local
        assert AMS_CHRONO.days.get_difference(end, start) == 1
        assert AMS_CHRONO.hours.get_difference(end, start) == 23
        assert AMS_CHRONO.days.get_difference_as_long(start, end) == -1
        assert AMS_CHRONO.hours.get_difference_as_long(start, end) == -23

    def test_get_value(self):
        duration = 23 * MILLIS_PER_HOUR
        assert AMS_CHRONO.hours.get_value(duration, BEFORE_GAP) == 23
        assert AMS_CHRONO.months.get_value_as_long(
            31 * 24 * MILLIS_PER_HOUR, utc_ms(2023, 1, 31, 23)
        ) == 1
        assert AMS_CHRONO.months.get_millis(1, utc_ms(2023, 1, 31, 23)) == (
            28 * 24 * MILLIS_PER_HOUR
        )

    def test_is_precise(self):
        assert AMS_CHRONO.hours.is_precise()
        assert not AMS_CHRONO.days.is_precise()
        assert not AMS_CHRONO.months.is_precise()
        assert INDIA_CHRONO.days.is_precise()
        assert not INDIA_CHRONO.months.is_precise()

    @pytest.mark.parametrize(
        "name, expect",
        [
            ("millis", True),
            ("seconds", True),
            ("minutes", True),
            ("hours", True),
            ("halfdays", False),
            ("days", False),
            ("weeks", False),
            ("months", False),
        ],
    )
    def test_is_time_unit(self, name, expect):
        assert getattr(AMS_CHRONO, name).is_time_unit is expect

    def test_passthrough(self):
        assert AMS_CHRONO.days.name == "days"
        assert AMS_CHRONO.days.unit_millis == ISO.days.unit_millis
        assert AMS_CHRONO.days.is_supported()

    def test_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            INDIA_CHRONO.hours.add(MAX_INSTANT, 0)

    def test_overflow_after_restoring_offset(self):
        minus_one = ZonedChronology(ISO, FixedOffsetZone(-MILLIS_PER_HOUR))
        plus_one = ZonedChronology(ISO, FixedOffsetZone(MILLIS_PER_HOUR))
        with pytest.raises(
            ArithmeticOverflow,
            match="Subtracting time zone offset caused overflow",
        ):
            minus_one.hours.add(MAX_INSTANT - 10, 1)
        with pytest.raises(ArithmeticOverflow):
            minus_one.hour_of_day.add(MAX_INSTANT - 10, 1)
        with pytest.raises(ArithmeticOverflow):
            plus_one.minute_of_hour.round_floor(MIN_INSTANT + 5)

    def test_rejects_unsupported(self):
        with pytest.raises(ValueError, match="unsupported"):
            ZonedDurationField(ISO.eras, AMS)

    def test_equality(self):
        field = ZonedDurationField(ISO.days, AMS)
        assert field == AMS_CHRONO.days
        assert hash(field) == hash(AMS_CHRONO.days)
        assert field != ZonedDurationField(ISO.days, INDIA)
        assert field != ZonedDurationField(ISO.hours, AMS)
        assert field == AlwaysEqual()
        assert field != NeverEqual()


class TestDateTimeField:
    def test_get(self):
        assert AMS_CHRONO.hour_of_day.get(BEFORE_GAP) == 1
        assert AMS_CHRONO.hour_of_day.get(AFTER_GAP) == 3
        assert AMS_CHRONO.day_of_month.get(utc_ms(2023, 3, 25, 23)) == 26
        assert INDIA_CHRONO.minute_of_hour.get(utc_ms(2024, 1, 1)) == 30

    def test_text(self):
        t = utc_ms(2023, 3, 25, 23, 30)  # Sunday in Amsterdam
        assert AMS_CHRONO.day_of_week.get_as_text(t) == "Sunday"
        assert AMS_CHRONO.day_of_week.get_as_short_text(t) == "Sun"
        assert AMS_CHRONO.day_of_week.value_as_text(1) == "Monday"
        assert AMS_CHRONO.month_of_year.value_as_short_text(3) == "Mar"
        assert AMS_CHRONO.month_of_year.maximum_text_length() == 9
        assert AMS_CHRONO.month_of_year.maximum_short_text_length() == 3
        assert not AMS_CHRONO.month_of_year.is_lenient()

    def test_add_time_field(self):
        assert AMS_CHRONO.hour_of_day.add(BEFORE_GAP, 1) == AFTER_GAP

    def test_add_date_field(self):
        assert AMS_CHRONO.day_of_month.add(utc_ms(2023, 3, 25, 11), 1) == (
            utc_ms(2023, 3, 26, 10)
        )

    def test_add_wrap_field(self):
        t = utc_ms(2023, 1, 31, 11)  # noon local
        assert AMS_CHRONO.day_of_month.add_wrap_field(t, 1) == utc_ms(
            2023, 1, 1, 11
        )
        # minutes wrap within the local hour
        assert AMS_CHRONO.minute_of_hour.add_wrap_field(
            utc_ms(2023, 3, 26, 0, 50), 20
        ) == utc_ms(2023, 3, 26, 0, 10)

    def test_set(self):
        assert AMS_CHRONO.hour_of_day.set(BEFORE_GAP, 4) == utc_ms(
            2023, 3, 26, 2, 30
        )
        assert AMS_CHRONO.hour_of_day.set(AFTER_GAP, 1) == BEFORE_GAP

    def test_set_into_gap(self):
        with pytest.raises(
            InvalidFieldValue, match="Value 2 for hour_of_day"
        ) as exc_info:
            AMS_CHRONO.hour_of_day.set(BEFORE_GAP, 2)
        assert isinstance(exc_info.value.__cause__, InvalidLocalInstant)
        assert exc_info.value.__cause__.zone_id == "Europe/Amsterdam"
        assert exc_info.value.field_name == "hour_of_day"

    def test_set_out_of_range(self):
        with pytest.raises(InvalidFieldValue, match=r"\[0,23\]"):
            AMS_CHRONO.hour_of_day.set(BEFORE_GAP, 24)

    def test_set_in_overlap_follows_the_instant(self):
        first = utc_ms(2023, 10, 29, 0, 10)  # 02:10 local, summer time
        second = utc_ms(2023, 10, 29, 1, 10)  # 02:10 local, winter time
        assert AMS_CHRONO.minute_of_hour.set(first, 50) == utc_ms(
            2023, 10, 29, 0, 50
        )
        assert AMS_CHRONO.minute_of_hour.set(second, 50) == utc_ms(
            2023, 10, 29, 1, 50
        )

    def test_set_text_not_verified(self):
        assert AMS_CHRONO.hour_of_day.set_text(BEFORE_GAP, "2") == AFTER_GAP
        assert AMS_CHRONO.month_of_year.set_text(
            utc_ms(2023, 1, 15, 11), "July"
        ) == utc_ms(2023, 7, 15, 10)

    def test_round_date_field(self):
        assert AMS_CHRONO.day_of_month.round_floor(
            utc_ms(2023, 3, 26, 12)
        ) == utc_ms(2023, 3, 25, 23)
        assert AMS_CHRONO.day_of_month.round_ceiling(
            utc_ms(2023, 3, 26, 12)
        ) == utc_ms(2023, 3, 26, 22)
        assert AMS_CHRONO.month_of_year.round_floor(
            utc_ms(2023, 7, 15)
        ) == utc_ms(2023, 6, 30, 22)

    def test_round_time_field(self):
        t = utc_ms(2024, 1, 1, 10, 45)  # 16:15 local
        assert INDIA_CHRONO.hour_of_day.round_floor(t) == utc_ms(
            2024, 1, 1, 10, 30
        )
        assert INDIA_CHRONO.hour_of_day.round_ceiling(t) == utc_ms(
            2024, 1, 1, 11, 30
        )
        assert INDIA_CHRONO.hour_of_day.round_half_floor(t) == utc_ms(
            2024, 1, 1, 10, 30
        )
        assert INDIA_CHRONO.hour_of_day.remainder(t) == 15 * MILLIS_PER_MINUTE

    def test_difference(self):
        start = utc_ms(2023, 3, 25, 23)
        end = utc_ms(2023, 3, 26, 22)
        assert AMS_CHRONO.day_of_month.get_difference(end, start) == 1
        assert AMS_CHRONO.hour_of_day.get_difference(end, start) == 23
        assert AMS_CHRONO.hour_of_day.get_difference_as_long(start, end) == (
            -23
        )

    def test_range_in_local_time(self):
        # February 28th 23:30Z is already March in Amsterdam
        t = utc_ms(2023, 2, 28, 23, 30)
        assert AMS_CHRONO.day_of_month.maximum_value(t) == 31
        assert AMS_CHRONO.day_of_month.maximum_value() == 31
        assert AMS_CHRONO.day_of_month.minimum_value(t) == 1
        assert AMS_CHRONO.day_of_month.minimum_value() == 1

    def test_leap_in_local_time(self):
        # December 31st 23:30Z is already 2024 in Amsterdam
        t = utc_ms(2023, 12, 31, 23, 30)
        assert AMS_CHRONO.year.is_leap(t)
        assert AMS_CHRONO.year.get_leap_amount(t) == 1
        assert not ISO.year.is_leap(t)

    def test_decorated_durations(self):
        field = AMS_CHRONO.hour_of_day
        assert field.duration_field is AMS_CHRONO.hours
        assert field.range_duration_field is AMS_CHRONO.days
        assert field.leap_duration_field is None
        assert AMS_CHRONO.year.leap_duration_field is AMS_CHRONO.days
        assert AMS_CHRONO.year.range_duration_field is None

    def test_is_time_unit(self):
        assert AMS_CHRONO.hour_of_day.is_time_unit
        assert AMS_CHRONO.minute_of_day.is_time_unit
        assert not AMS_CHRONO.halfday_of_day.is_time_unit
        assert not AMS_CHRONO.day_of_month.is_time_unit
        # eras are unsupported, so have no length
        assert AMS_CHRONO.era.is_time_unit

    def test_rejects_unsupported(self):
        class Unsupported(type(ISO.hour_of_day)):
            __slots__ = ()

            def is_supported(self):
                return False

        field = Unsupported("foo", ISO.hours, ISO.days)
        with pytest.raises(ValueError, match="unsupported"):
            ZonedDateTimeField(field, AMS, AMS_CHRONO.hours, None, None)

    def test_equality(self):
        field = ZonedDateTimeField(
            ISO.year, AMS, AMS_CHRONO.years, None, AMS_CHRONO.days
        )
        assert field == AMS_CHRONO.year
        assert hash(field) == hash(AMS_CHRONO.year)
        assert field == AlwaysEqual()
        assert field != NeverEqual()
        assert field != ZonedDateTimeField(
            ISO.year, INDIA, AMS_CHRONO.years, None, AMS_CHRONO.days
        )
        assert field != ZonedDateTimeField(
            ISO.year, AMS, INDIA_CHRONO.years, None, AMS_CHRONO.days
        )
        assert field != ZonedDateTimeField(
            ISO.year, AMS, AMS_CHRONO.years, AMS_CHRONO.days, AMS_CHRONO.days
        )

    def test_equality_ignores_leap_duration(self):
        with_leap = ZonedDateTimeField(
            ISO.year, AMS, AMS_CHRONO.years, None, AMS_CHRONO.days
        )
        without_leap = ZonedDateTimeField(
            ISO.year, AMS, AMS_CHRONO.years, None, None
        )
        assert with_leap == without_leap

    def test_repr(self):
        assert repr(AMS_CHRONO.hour_of_day) == "DateTimeField[hour_of_day]"


_instants = integers(
    min_value=utc_ms(1980, 1, 1), max_value=utc_ms(2100, 1, 1)
)
_fixed_zones = integers(
    min_value=-18 * MILLIS_PER_HOUR, max_value=18 * MILLIS_PER_HOUR
).map(FixedOffsetZone)


@given(_instants, integers(min_value=-10_000, max_value=10_000))
def test_adding_hours_is_elapsed_time(instant, hours):
    assert AMS_CHRONO.hours.add(instant, hours) == (
        instant + hours * MILLIS_PER_HOUR
    )


@given(_instants, _fixed_zones)
def test_fields_read_local_time(instant, zone):
    chrono = ZonedChronology(ISO, zone)
    local = zone.utc_to_local(instant)
    for name in ("year", "day_of_year", "hour_of_day", "millis_of_day"):
        assert getattr(chrono, name).get(instant) == getattr(ISO, name).get(
            local
        )


@given(_instants, _fixed_zones)
def test_floor_is_local_midnight(instant, zone):
    chrono = ZonedChronology(ISO, zone)
    floor = chrono.day_of_month.round_floor(instant)
    assert floor <= instant
    assert chrono.millis_of_day.get(floor) == 0
    assert chrono.day_of_month.get(floor) == chrono.day_of_month.get(instant)


@given(_instants, integers(min_value=0, max_value=59))
def test_setting_minutes_always_succeeds(instant, minute):
    result = AMS_CHRONO.minute_of_hour.set(instant, minute)
    assert AMS_CHRONO.minute_of_hour.get(result) == minute
    assert AMS_CHRONO.hour_of_day.get(result) == (
        AMS_CHRONO.hour_of_day.get(instant)
    )


@given(_instants, sampled_from(["days", "months", "years"]))
def test_date_difference_inverts_add(instant, name):
    field = getattr(AMS_CHRONO, name)
    later = field.add(instant, 3)
    assert field.get_difference(later, instant) in (2, 3)


@given(_instants, integers(min_value=-10_000, max_value=10_000))
def test_adding_hours_is_reversible(instant, hours):
    later = AMS_CHRONO.hours.add(instant, hours)
    assert AMS_CHRONO.hours.add(later, -hours) == instant


@given(_instants)
def test_local_round_trip(instant):
    local = AMS.utc_to_local(instant)
    result = AMS_CHRONO.local_to_utc(local)
    assert AMS.utc_to_local(result) == local
    if result != instant:
        # an overlap: the earlier of the two instants is chosen
        assert result == instant - MILLIS_PER_HOUR


@given(
    _instants,
    sampled_from(["days", "weeks", "months", "years"]),
    integers(min_value=-50, max_value=50),
)
def test_date_units_keep_local_time(instant, name, amount):
    local = AMS.utc_to_local(instant)
    # months and years clamp the day at the end of the month
    assume(ISO.day_of_month.get(local) <= 28)
    # the wall time doesn't exist on the target date
    assume(not AMS.is_local_gap(getattr(ISO, name).add(local, amount)))
    field = getattr(AMS_CHRONO, name)
    result = field.add(field.add(instant, amount), -amount)
    assert AMS.utc_to_local(result) == local
