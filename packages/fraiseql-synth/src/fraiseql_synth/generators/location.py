"""Countries, cities, streets, postcodes and states."""

from typing import Any

from fraiseql_synth import datasets
from fraiseql_synth.exceptions import UniqueCountExceededError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import CartesianIndexSampler
from fraiseql_synth.generators.people import (
    DatasetGenerator,
    UniqueDatasetGenerator,
    longest_length,
)
from fraiseql_synth.utils import OrderedNumberRange, fill_template


class UniqueCountryGenerator(UniqueDatasetGenerator):
    kind = "unique_country"
    dataset = datasets.COUNTRIES
    label = "country"


class CountryGenerator(DatasetGenerator):
    kind = "country"
    unique_version = UniqueCountryGenerator
    dataset = datasets.COUNTRIES
    label = "country"


class UniqueStateGenerator(UniqueDatasetGenerator):
    kind = "unique_state"
    dataset = datasets.STATES
    label = "state"


class StateGenerator(DatasetGenerator):
    kind = "state"
    unique_version = UniqueStateGenerator
    dataset = datasets.STATES
    label = "state"


class _UniqueSamplerGenerator(AbstractGenerator):
    """Unique values decoded from Cartesian pools built by ``pools()``."""

    is_generator_unique = True
    label = ""
    max_length = 0

    def pools(self) -> list[list]:
        raise NotImplementedError

    def format(self, pool_index: int, tokens: list) -> Any:
        raise NotImplementedError

    def get_max_unique_count(self) -> int | float:
        return CartesianIndexSampler(self.pools()).max_count

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        sampler = CartesianIndexSampler(self.pools())
        if count > sampler.max_count:
            raise UniqueCountExceededError(f"{self.label} values", sampler.max_count)
        if self.max_length:
            self._check_string_length(self.label, self.max_length)
        sampler.init(count, seed)
        self.state["sampler"] = sampler

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        pool_index, tokens = state["sampler"].next(self._draw)
        return self.format(pool_index, tokens)


CITY_MAX_LENGTH = longest_length(datasets.FIRST_NAMES) + longest_length(datasets.CITY_SUFFIXES)


class UniqueCityGenerator(_UniqueSamplerGenerator):
    kind = "unique_city"
    label = "city"
    max_length = CITY_MAX_LENGTH

    def pools(self) -> list[list]:
        return [[datasets.FIRST_NAMES, datasets.CITY_SUFFIXES]]

    def format(self, pool_index: int, tokens: list) -> Any:
        return "".join(tokens)


class CityGenerator(AbstractGenerator):
    """City names such as ``Jamesport`` (first name + city suffix)."""

    kind = "city"
    unique_version = UniqueCityGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length("city", CITY_MAX_LENGTH)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        return self._pick(datasets.FIRST_NAMES) + self._pick(datasets.CITY_SUFFIXES)


STREET_NUMBERS = OrderedNumberRange(1, 999)
STREET_ADDRESS_MAX_LENGTH = (
    3
    + max(longest_length(datasets.FIRST_NAMES), longest_length(datasets.LAST_NAMES))
    + longest_length(datasets.STREET_SUFFIXES)
    + 2
)


# Surnames that are also first names would repeat addresses across the two pools.
_FIRST_NAME_SET = frozenset(datasets.FIRST_NAMES)
STREET_SURNAMES = tuple(name for name in datasets.LAST_NAMES if name not in _FIRST_NAME_SET)


class UniqueStreetAddressGenerator(_UniqueSamplerGenerator):
    kind = "unique_street_address"
    label = "street address"
    max_length = STREET_ADDRESS_MAX_LENGTH

    def pools(self) -> list[list]:
        return [
            [STREET_NUMBERS, datasets.FIRST_NAMES, datasets.STREET_SUFFIXES],
            [STREET_NUMBERS, STREET_SURNAMES, datasets.STREET_SUFFIXES],
        ]

    def format(self, pool_index: int, tokens: list) -> Any:
        number, name, suffix = tokens
        return f"{number} {name} {suffix}"


class StreetAddressGenerator(AbstractGenerator):
    """Addresses such as ``742 Evergreen Terrace``."""

    kind = "street_address"
    unique_version = UniqueStreetAddressGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length("street address", STREET_ADDRESS_MAX_LENGTH)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        number = self._draw(1, 999)
        names = datasets.FIRST_NAMES if self._draw(0, 1) == 0 else datasets.LAST_NAMES
        return f"{number} {self._pick(names)} {self._pick(datasets.STREET_SUFFIXES)}"


def _fill_postcode(template: str, number: int) -> str:
    return fill_template(template, list(str(number)), template.count("#"), "0")


class UniquePostcodeGenerator(_UniqueSamplerGenerator):
    kind = "unique_postcode"
    label = "postcode"
    max_length = max(len(template) for template in datasets.POSTCODE_FORMATS)

    def pools(self) -> list[list]:
        return [
            [OrderedNumberRange(0, 10 ** template.count("#") - 1)]
            for template in datasets.POSTCODE_FORMATS
        ]

    def format(self, pool_index: int, tokens: list) -> Any:
        return _fill_postcode(datasets.POSTCODE_FORMATS[pool_index], tokens[0])


class PostcodeGenerator(AbstractGenerator):
    """US postcodes, ``#####`` or ``#####-####``."""

    kind = "postcode"
    unique_version = UniquePostcodeGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length(
            "postcode", max(len(template) for template in datasets.POSTCODE_FORMATS)
        )

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        template = self._pick(datasets.POSTCODE_FORMATS)
        return _fill_postcode(template, self._draw(0, 10 ** template.count("#") - 1))
