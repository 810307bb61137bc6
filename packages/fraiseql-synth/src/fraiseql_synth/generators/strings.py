"""Random strings, UUIDs, lorem ipsum, enums and JSON documents."""

import json
import uuid
from typing import Any

from fraiseql_synth import datasets
from fraiseql_synth.exceptions import UniqueCountExceededError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.location import UniqueCountryGenerator
from fraiseql_synth.generators.numeric import BooleanGenerator, IntGenerator
from fraiseql_synth.generators.people import EmailGenerator, FirstNameGenerator
from fraiseql_synth.generators.temporal import DateGenerator
from fraiseql_synth.generators.wrappers import ValuesFromArrayGenerator

STRING_CHARS = "1234567890abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
MIN_STRING_LENGTH = 7
MAX_STRING_LENGTH = 20
UNIQUE_MARK_POSITION = 4


def _encode(value: str, data_type: str | None) -> Any:
    if data_type in ("buffer", "object"):
        return value.encode()
    return value


class UniqueStringGenerator(AbstractGenerator):
    """
    Distinct alphanumeric strings of length 7 to 20.

    Row ``i`` gets ``hex(i)`` spliced into a random string at position 4.
    """

    kind = "unique_string"
    is_generator_unique = True

    def _unique_mark(self, i: int) -> str:
        return format(i, "x")

    def _length_bounds(self, mark: str) -> tuple[int, int]:
        return MIN_STRING_LENGTH, MAX_STRING_LENGTH - len(mark)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        mark = self._unique_mark(i)
        min_length, max_length = self._length_bounds(mark)
        length = self._draw(min_length, max_length)
        chars = "".join(self._pick(STRING_CHARS) for _ in range(length))
        value = chars[:UNIQUE_MARK_POSITION] + mark + chars[UNIQUE_MARK_POSITION:]
        return _encode(value, self.data_type)


class UniqueStringGeneratorV2(UniqueStringGenerator):
    """
    Unique strings that fit the column length.

    The hex mark is zero-padded to a fixed width for the whole run, which
    keeps values distinct whatever random characters surround it.
    """

    version = 2

    def _max_length(self) -> int:
        length = self.string_length or self.type_params.length
        return MAX_STRING_LENGTH if length is None else min(MAX_STRING_LENGTH, length)

    def get_max_unique_count(self) -> int | float:
        return 16 ** self._max_length()

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        width = len(format(max(count - 1, 0), "x"))
        if width > self._max_length():
            raise UniqueCountExceededError(
                f"strings of length {self._max_length()}", self.get_max_unique_count()
            )
        self.state["width"] = width

    def _unique_mark(self, i: int) -> str:
        return format(i, f"0{self._require_state()['width']}x")

    def _length_bounds(self, mark: str) -> tuple[int, int]:
        max_length = self._max_length() - len(mark)
        return min(MIN_STRING_LENGTH, max_length), max_length


class StringGenerator(AbstractGenerator):
    """Alphanumeric strings of length 7 to 20; ``bytes`` for buffer columns."""

    kind = "string"
    unique_version = UniqueStringGenerator

    def _length_bounds(self) -> tuple[int, int]:
        return MIN_STRING_LENGTH, MAX_STRING_LENGTH

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        length = self._draw(*self._length_bounds())
        value = "".join(self._pick(STRING_CHARS) for _ in range(length))
        return _encode(value, self.data_type)


class StringGeneratorV2(StringGenerator):
    """Strings capped at the column length."""

    version = 2
    unique_version = UniqueStringGeneratorV2

    def _length_bounds(self) -> tuple[int, int]:
        length = self.string_length or self.type_params.length
        max_length = MAX_STRING_LENGTH if length is None else min(MAX_STRING_LENGTH, length)
        return min(MIN_STRING_LENGTH, max_length), max_length


class UUIDGenerator(AbstractGenerator):
    """UUID-shaped strings from random hex digits."""

    kind = "uuid"
    is_generator_unique = True
    template = "########-####-4###-####-############"

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        hex_digits = "0123456789abcdef"
        return "".join(
            self._pick(hex_digits) if char == "#" else char for char in self.template
        )


class UUIDGeneratorV4(UUIDGenerator):
    """RFC 4122 version 4 UUIDs with the variant bits set."""

    version = 4

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        return str(uuid.UUID(int=self._draw(0, (1 << 128) - 1), version=4))


class EnumGenerator(AbstractGenerator):
    """Values of an enum column, drawn through :class:`ValuesFromArrayGenerator`."""

    kind = "enum"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        generator = ValuesFromArrayGenerator(values=list(self.params["enum_values"]))
        generator.is_unique = self.is_unique
        generator.not_null = self.not_null
        generator.init(count, seed)
        self.state["generator"] = generator

    def get_max_unique_count(self) -> int | float:
        return len(self.params["enum_values"])

    def generate(self, i: int = 0, **context: Any) -> Any:
        return self._require_state()["generator"].generate(i)


class LoremIpsumGenerator(AbstractGenerator):
    """``sentences_count`` sentences (default 1) of Latin lorem words."""

    kind = "lorem_ipsum"

    def _sentence(self) -> str:
        words = [self._pick(datasets.LOREM_WORDS) for _ in range(self._draw(4, 12))]
        return " ".join(words).capitalize() + "."

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        count = self.params.get("sentences_count") or 1
        return " ".join(self._sentence() for _ in range(count))


class JsonGenerator(AbstractGenerator):
    """
    Small personal-record documents.

    Salary and work start date are only present when ``has_job`` is true.
    Returns a dict, or a JSON string when ``data_type`` is ``string``.
    """

    kind = "json"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        generators = {
            "email": EmailGenerator(),
            "name": FirstNameGenerator(),
            "is_graduated": BooleanGenerator(),
            "has_job": BooleanGenerator(),
            "salary": IntGenerator(min_value=200, max_value=4000),
            "started_working": DateGenerator(),
            "visited_countries_number": IntGenerator(min_value=0, max_value=4),
        }
        generators["started_working"].data_type = "string"
        for offset, generator in enumerate(generators.values()):
            generator.init(count, seed + offset)
        self.state.update(generators=generators, seed=seed)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        generators = state["generators"]

        visited_countries_number = generators["visited_countries_number"].generate(i)
        countries = UniqueCountryGenerator()
        countries.init(visited_countries_number, state["seed"] + i)

        document: dict[str, Any] = {
            "email": generators["email"].generate(i),
            "name": generators["name"].generate(i),
            "is_graduated": generators["is_graduated"].generate(i),
        }
        has_job = generators["has_job"].generate(i)
        document["has_job"] = has_job
        salary = generators["salary"].generate(i)
        started_working = generators["started_working"].generate(i)
        if has_job:
            document["salary"] = salary
            document["started_working"] = started_working
        document["visited_countries"] = [
            countries.generate(k) for k in range(visited_countries_number)
        ]

        if self.data_type == "string":
            return json.dumps(document)
        return document
