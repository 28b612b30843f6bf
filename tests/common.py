from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class AlwaysEqual:
    def __eq__(self, other):
        return True


class NeverEqual:
    def __eq__(self, other):
        return False


def utc_ms(*args) -> int:
    "Milliseconds since the epoch of a UTC datetime"
    return (
        datetime(*args, tzinfo=timezone.utc) - _EPOCH
    ) // timedelta(milliseconds=1)
