"""Date, time, timestamp, year and interval generators."""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from fraiseql_synth.exceptions import GeneratorConfigError, UniqueCountExceededError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import UniqueIntGenerator
from fraiseql_synth.utils import OrderedNumberRange, fast_cartesian_product

ANCHOR_DATE = date(2024, 5, 8)
ANCHOR_DATETIME = datetime(2024, 5, 8, 12, 0, 0)
ANCHOR_YEAR = ANCHOR_DATE.year

DAYS_IN_YEAR = 365
SECONDS_IN_DAY = 24 * 60 * 60


def _parse_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise GeneratorConfigError(f"Invalid {name} date: {value!r}.") from e


def _parse_time(value: Any, name: str) -> datetime:
    """Place ``HH:MM[:SS][Z]`` on the anchor date."""
    if isinstance(value, time):
        return datetime.combine(ANCHOR_DATE, value.replace(tzinfo=None))
    text = str(value).rstrip("Zz")
    try:
        parsed = time.fromisoformat(text)
    except ValueError as e:
        raise GeneratorConfigError(f"Invalid {name} time: {value!r}.") from e
    return datetime.combine(ANCHOR_DATE, parsed)


class DateGenerator(AbstractGenerator):
    """
    Dates within four years of 2024-05-08, or within ``[min_date, max_date]``.

    Returns ``datetime.date`` or, when ``data_type`` is ``string``, ``YYYY-MM-DD``.
    """

    kind = "date"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        min_date = self.params.get("min_date")
        max_date = self.params.get("max_date")
        span = timedelta(days=4 * DAYS_IN_YEAR)

        if min_date is None and max_date is None:
            min_date, max_date = ANCHOR_DATE - span, ANCHOR_DATE + span
        elif min_date is None:
            max_date = _parse_date(max_date, "max")
            min_date = max_date - 2 * span
        elif max_date is None:
            min_date = _parse_date(min_date, "min")
            max_date = min_date + 2 * span
        else:
            min_date = _parse_date(min_date, "min")
            max_date = _parse_date(max_date, "max")

        if min_date > max_date:
            raise GeneratorConfigError(f"min_date ({min_date}) is greater than max_date ({max_date}).")
        self.state.update(min_date=min_date, days=(max_date - min_date).days)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = state["min_date"] + timedelta(days=self._draw(0, state["days"]))
        if self.data_type == "string":
            return value.isoformat()
        return value


class TimeGenerator(AbstractGenerator):
    """Times of day as ``HH:MM:SS`` within a day of 12:00, or ``[min_time, max_time]``."""

    kind = "time"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        min_time = self.params.get("min_time")
        max_time = self.params.get("max_time")
        day = timedelta(days=1)

        lower = ANCHOR_DATETIME - day if min_time is None else _parse_time(min_time, "min")
        upper = ANCHOR_DATETIME + day if max_time is None else _parse_time(max_time, "max")
        if lower > upper:
            raise GeneratorConfigError(f"min_time ({min_time}) is greater than max_time ({max_time}).")
        self.state.update(lower=lower, seconds=int((upper - lower).total_seconds()))

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = state["lower"] + timedelta(seconds=self._draw(0, state["seconds"]))
        return value.strftime("%H:%M:%S")


class TimestampGenerator(AbstractGenerator):
    """
    Timestamps within two years of 2024-05-08 12:00.

    Returns naive ``datetime`` or, when ``data_type`` is ``string``,
    ``YYYY-MM-DD HH:MM:SS``.
    """

    kind = "timestamp"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        span = 2 * DAYS_IN_YEAR * SECONDS_IN_DAY
        self.state["lower"] = ANCHOR_DATETIME - timedelta(seconds=span)
        self.state["seconds"] = 2 * span

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = state["lower"] + timedelta(seconds=self._draw(0, state["seconds"]))
        if self.data_type == "string":
            return value.strftime("%Y-%m-%d %H:%M:%S")
        return value


class DatetimeGenerator(TimestampGenerator):
    kind = "datetime"


class TimestampIntGenerator(AbstractGenerator):
    """Unix timestamps in ``seconds`` (default) or ``milliseconds``."""

    kind = "timestamp_int"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        timestamps = TimestampGenerator()
        timestamps.init(count, seed)
        self.state["timestamps"] = timestamps

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = state["timestamps"].generate(i).replace(tzinfo=timezone.utc)
        if self.params.get("unit_of_time") == "milliseconds":
            return int(value.timestamp()) * 1000
        return int(value.timestamp())


class YearGenerator(AbstractGenerator):
    kind = "year"

    def generate(self, i: int = 0, **context: Any) -> Any:
        return str(self._draw(ANCHOR_YEAR - 10, ANCHOR_YEAR + 10))


INTERVAL_FIELDS: dict[str, tuple[int, int]] = {
    "year": (0, 5),
    "month": (0, 12),
    "day": (1, 29),
    "hour": (0, 24),
    "minute": (0, 60),
    "second": (0, 60),
}


def interval_fields(fields: str | None) -> list[tuple[str, int, int]]:
    """
    Fields used by interval generators, truncated at the last field named in
    ``fields`` (``"day to second"`` ends at ``second``, ``"month"`` at ``month``).
    """
    names = list(INTERVAL_FIELDS)
    if fields:
        last = fields.strip().lower().split()[-1]
        if last not in INTERVAL_FIELDS:
            raise GeneratorConfigError(f"Unknown interval field: {fields!r}.")
        names = names[: names.index(last) + 1]
    return [(name, *INTERVAL_FIELDS[name]) for name in names]


def _format_interval(fields: list[tuple[str, int, int]], values: list[int]) -> str:
    return " ".join(f"{value} {name}" for (name, _, _), value in zip(fields, values))


class UniqueIntervalGenerator(AbstractGenerator):
    """Distinct intervals, drawn with a retry set."""

    kind = "unique_interval"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return math.prod(high - low + 1 for _, low, high in interval_fields(self.params.get("fields")))

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("intervals", max_count)
        self.state["fields"] = interval_fields(self.params.get("fields"))
        self.state["seen"] = set()

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        while True:
            values = [self._draw(low, high) for _, low, high in state["fields"]]
            interval = _format_interval(state["fields"], values)
            if interval not in state["seen"]:
                state["seen"].add(interval)
                return interval


class UniqueIntervalGeneratorV2(UniqueIntervalGenerator):
    """Distinct intervals decoded from unique indices over the field ranges."""

    version = 2

    def init(self, count: int, seed: int) -> None:
        AbstractGenerator.init(self, count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("intervals", max_count)

        fields = interval_fields(self.params.get("fields"))
        index_generator = UniqueIntGenerator(min_value=0, max_value=max_count - 1)
        index_generator.init(count, seed)
        self.state.update(
            fields=fields,
            ranges=[OrderedNumberRange(low, high) for _, low, high in fields],
            index_generator=index_generator,
        )

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        values = fast_cartesian_product(state["ranges"], state["index_generator"].generate())
        return _format_interval(state["fields"], values)


class IntervalGenerator(AbstractGenerator):
    """Intervals such as ``1 year 3 month 12 day``, limited by the ``fields`` param."""

    kind = "interval"
    unique_version = UniqueIntervalGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self.state["fields"] = interval_fields(self.params.get("fields"))

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        values = [self._draw(low, high) for _, low, high in state["fields"]]
        return _format_interval(state["fields"], values)
