"""Tests for value generators."""

import json
import math
import re
import uuid

import pytest

from fraiseql_synth import datasets
from fraiseql_synth.exceptions import (
    CapacityError,
    GeneratorConfigError,
    GeneratorStateError,
    UniqueCountExceededError,
    WeightsSumError,
)
from fraiseql_synth.generators import (
    EmailGenerator,
    FirstNameGenerator,
    IntGenerator,
    IntPrimaryKeyGenerator,
    PointGenerator,
    StringGenerator,
    UniqueIntGenerator,
)
from fraiseql_synth.generators.geometry import (
    GeometryGenerator,
    InetGenerator,
    LineGenerator,
    UniqueGeometryGenerator,
    UniqueInetGenerator,
    UniqueLineGenerator,
    UniquePointGenerator,
    UniqueVectorGenerator,
    VectorGenerator,
)
from fraiseql_synth.generators.location import (
    STREET_SURNAMES,
    CityGenerator,
    CountryGenerator,
    PostcodeGenerator,
    StateGenerator,
    StreetAddressGenerator,
    UniqueCityGenerator,
    UniqueCountryGenerator,
    UniquePostcodeGenerator,
    UniqueStateGenerator,
    UniqueStreetAddressGenerator,
)
from fraiseql_synth.generators.numeric import BitStringGenerator, UniqueBitStringGenerator
from fraiseql_synth.generators.strings import (
    EnumGenerator,
    JsonGenerator,
    LoremIpsumGenerator,
    UniqueStringGenerator,
    UniqueStringGeneratorV2,
    UUIDGeneratorV4,
)
from fraiseql_synth.generators.people import (
    CompanyNameGenerator,
    FullNameGenerator,
    PhoneNumberGenerator,
    UniqueCompanyNameGenerator,
    UniqueFirstNameGenerator,
    UniqueFullNameGenerator,
)
from fraiseql_synth.generators.temporal import (
    IntervalGenerator,
    UniqueIntervalGenerator,
    UniqueIntervalGeneratorV2,
)
from fraiseql_synth.generators.wrappers import (
    ArrayGenerator,
    CompositeUniqueKeyGenerator,
    SelfRelationsValuesFromArrayGenerator,
    ValuesFromArrayGenerator,
    WeightedRandomGenerator,
)


def _values(generator, count: int, seed: int = 1) -> list:
    generator.init(count, seed)
    return [generator.generate(i) for i in range(count)]


class TestUniqueInt:
    def test_values_are_distinct_and_in_range(self):
        """Every value is unique and inside the requested bounds."""
        values = _values(UniqueIntGenerator(min_value=1, max_value=100), 100)
        assert sorted(values) == list(range(1, 101))

    def test_default_range_scales_with_count(self):
        """Without bounds the range is ±count*10."""
        values = _values(UniqueIntGenerator(), 50)
        assert len(set(values)) == 50
        assert all(-500 <= value <= 500 for value in values)

    def test_count_larger_than_range(self):
        """Asking for more values than the range holds fails at init."""
        with pytest.raises(CapacityError):
            UniqueIntGenerator(min_value=1, max_value=5).init(6, 0)

    def test_same_seed_same_values(self):
        """Generation is reproducible."""
        first = _values(UniqueIntGenerator(min_value=0, max_value=1000), 20, seed=9)
        second = _values(UniqueIntGenerator(min_value=0, max_value=1000), 20, seed=9)
        assert first == second


def test_int_primary_key_is_sequential():
    """Primary keys count up from 1."""
    assert _values(IntPrimaryKeyGenerator(), 5) == [1, 2, 3, 4, 5]


def test_int_primary_key_capacity():
    """A smallserial-sized key can't hold more rows than its max value."""
    with pytest.raises(CapacityError):
        IntPrimaryKeyGenerator(max_value=10).init(11, 0)


def test_int_generator_string_data_type():
    """String columns get the number as text."""
    generator = IntGenerator(min_value=1, max_value=3)
    generator.data_type = "string"
    assert all(value in {"1", "2", "3"} for value in _values(generator, 20))


def test_generate_before_init():
    """Generating without init raises a state error."""
    with pytest.raises(GeneratorStateError):
        IntGenerator().generate()


class TestStrings:
    def test_unique_strings(self):
        """Ten unique strings, each 7 to 20 characters."""
        values = _values(UniqueStringGenerator(), 10)
        assert len(set(values)) == 10
        for value in values:
            assert 7 <= len(value) <= 20, f"Unexpected length {len(value)} for {value}"

    def test_unique_strings_v2_fit_column_length(self):
        """Version 2 respects varchar length and stays unique."""
        generator = UniqueStringGeneratorV2()
        generator.string_length = 5
        values = _values(generator, 200)
        assert len(set(values)) == 200
        assert all(len(value) <= 5 for value in values)

    def test_unique_strings_v2_capacity(self):
        """The unique mark must fit in the column."""
        generator = UniqueStringGeneratorV2()
        generator.string_length = 1
        with pytest.raises(UniqueCountExceededError):
            generator.init(17, 0)

    def test_buffer_columns_get_bytes(self):
        """Buffer columns receive encoded bytes."""
        generator = StringGenerator()
        generator.data_type = "buffer"
        assert all(isinstance(value, bytes) for value in _values(generator, 5))

    def test_uuid_v4(self):
        """Version 4 UUIDs parse and carry version 4."""
        for value in _values(UUIDGeneratorV4(), 10):
            assert uuid.UUID(value).version == 4


class TestPeople:
    def test_first_names_come_from_dataset(self):
        """Names are picked from the bundled list."""
        assert all(value in datasets.FIRST_NAMES for value in _values(FirstNameGenerator(), 30))

    def test_unique_first_name_capacity(self):
        """Unique first names can't exceed the dataset size."""
        with pytest.raises(UniqueCountExceededError):
            UniqueFirstNameGenerator().init(len(datasets.FIRST_NAMES) + 1, 0)

    def test_first_name_length_restriction(self):
        """A column too short for the longest name is rejected."""
        generator = FirstNameGenerator()
        generator.string_length = 2
        with pytest.raises(GeneratorConfigError, match="db column length restriction"):
            generator.init(1, 0)

    def test_emails_are_unique(self):
        """Emails are unique by construction."""
        values = _values(EmailGenerator(), 100)
        assert len(set(values)) == 100
        assert all(re.fullmatch(r"[^@\s]+@[^@\s]+", value) for value in values)


class TestValuesFromArray:
    def test_picks_from_values(self):
        """Plain lists are sampled uniformly."""
        values = _values(ValuesFromArrayGenerator(values=["a", "b", "c"]), 30)
        assert set(values) <= {"a", "b", "c"}

    def test_unique_returns_each_value_once(self):
        """Unique columns never repeat a value."""
        generator = ValuesFromArrayGenerator(values=list(range(10)))
        generator.is_unique = True
        assert sorted(_values(generator, 10)) == list(range(10))

    def test_unique_not_null_needs_enough_values(self):
        """A unique not-null column can't be filled from too few values."""
        generator = ValuesFromArrayGenerator(values=[1, 2])
        generator.is_unique = True
        generator.not_null = True
        with pytest.raises(CapacityError, match="no enough values"):
            generator.init(3, 0)

    def test_max_repeated_values_count(self):
        """Each value is used at most ``max_repeated_values_count`` times."""
        generator = ValuesFromArrayGenerator(values=[1, 2, 3])
        generator.max_repeated_values_count = 2
        values = _values(generator, 6)
        assert sorted(values) == [1, 1, 2, 2, 3, 3]

    def test_exhausted_pool_returns_none(self):
        """Rows past the capacity of a nullable column get None."""
        generator = ValuesFromArrayGenerator(values=[1, 2])
        generator.max_repeated_values_count = 1
        values = _values(generator, 4)
        assert sorted(v for v in values if v is not None) == [1, 2]
        assert values.count(None) == 2

    def test_not_null_capacity(self):
        """Not-null columns reject capacities smaller than the count."""
        generator = ValuesFromArrayGenerator(values=[1, 2])
        generator.not_null = True
        generator.max_repeated_values_count = 1
        with pytest.raises(CapacityError, match="notNull"):
            generator.init(3, 0)

    def test_empty_values(self):
        """An empty pool is a configuration error."""
        with pytest.raises(GeneratorConfigError, match="values length equals zero"):
            ValuesFromArrayGenerator(values=[]).init(1, 0)

    def test_weighted_groups(self):
        """Weighted groups only yield their own values."""
        generator = ValuesFromArrayGenerator(
            values=[{"weight": 0.5, "values": ["x"]}, {"weight": 0.5, "values": ["y", "z"]}]
        )
        assert set(_values(generator, 50)) <= {"x", "y", "z"}

    def test_weights_must_sum_to_one(self):
        """Weights summing to anything but 1 are rejected."""
        generator = ValuesFromArrayGenerator(
            values=[{"weight": 0.5, "values": ["x"]}, {"weight": 0.4, "values": ["y"]}]
        )
        with pytest.raises(WeightsSumError):
            generator.init(5, 0)


def test_self_relation_values_form_a_forest():
    """Early rows point at themselves, later rows at one of those roots."""
    values = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
    generator = SelfRelationsValuesFromArrayGenerator(values=values)
    generated = _values(generator, 10)

    roots_count = generator.state["first_values_count"]
    roots = generated[:roots_count]
    assert roots == values[: len(roots)]
    assert 2 <= len(roots) <= 4
    assert set(generated) <= set(roots)


def test_weighted_random_delegates():
    """Each row comes from one of the weighted generators."""
    generator = WeightedRandomGenerator(
        weighted_values=[
            {"weight": 0.5, "value": IntGenerator(min_value=0, max_value=9)},
            {"weight": 0.5, "value": IntGenerator(min_value=100, max_value=109)},
        ]
    )
    values = _values(generator, 100)
    assert all(0 <= v <= 9 or 100 <= v <= 109 for v in values)
    assert any(v < 10 for v in values) and any(v >= 100 for v in values)


def test_array_generator_size():
    """Arrays have the requested size."""
    values = _values(ArrayGenerator(base_column_gen=IntGenerator(), size=3), 5)
    assert all(len(value) == 3 for value in values)


def test_enum_values():
    """Enum columns only get their labels."""
    values = _values(EnumGenerator(enum_values=["draft", "published"]), 20)
    assert set(values) <= {"draft", "published"}


def test_point_as_text_literal():
    """String point columns get ``(x,y)`` literals."""
    generator = PointGenerator()
    generator.data_type = "string"
    for value in _values(generator, 5):
        assert re.fullmatch(r"\(-?[\d.]+,-?[\d.]+\)", value), value


class TestCompositeUniqueKey:
    def test_tuples_are_unique(self):
        """Row tuples across the key columns never repeat."""
        composite = CompositeUniqueKeyGenerator()
        composite.add_generator("x", UniqueIntGenerator(min_value=0, max_value=9))
        composite.add_generator("y", UniqueIntGenerator(min_value=0, max_value=9))
        composite.init(50, 3)

        pairs = [
            (composite.generate(i, column_name="x"), composite.generate(i, column_name="y"))
            for i in range(50)
        ]
        assert len(set(pairs)) == 50

    def test_too_few_combinations(self):
        """The product of the domains must cover the count."""
        composite = CompositeUniqueKeyGenerator()
        composite.add_generator("x", UniqueIntGenerator(min_value=0, max_value=1))
        composite.add_generator("y", UniqueIntGenerator(min_value=0, max_value=1))
        with pytest.raises(CapacityError):
            composite.init(5, 0)

    def test_unknown_column(self):
        """Asking for a column outside the key fails."""
        composite = CompositeUniqueKeyGenerator()
        composite.add_generator("x", UniqueIntGenerator(min_value=0, max_value=9))
        composite.init(3, 0)
        with pytest.raises(GeneratorStateError):
            composite.generate(0, column_name="z")


def _distinct(values) -> int:
    return len({repr(value) for value in values})


UNIQUE_CASES = [
    pytest.param(lambda: UniquePointGenerator(min_value=0, max_value=5), 40, id="point"),
    pytest.param(lambda: UniqueLineGenerator(min_value=-2, max_value=2), 40, id="line"),
    pytest.param(lambda: UniqueGeometryGenerator(decimal_places=0), 500, id="geometry"),
    pytest.param(
        lambda: UniqueVectorGenerator(dimensions=2, min_value=0, max_value=3, decimal_places=0),
        16,
        id="vector",
    ),
    pytest.param(lambda: UniqueInetGenerator(), 300, id="inet-v4"),
    pytest.param(lambda: UniqueInetGenerator(ip_address="ipv6", include_cidr=False), 100, id="inet-v6"),
    pytest.param(lambda: UniqueCountryGenerator(), len(datasets.COUNTRIES), id="country"),
    pytest.param(lambda: UniqueCityGenerator(), 500, id="city"),
    pytest.param(lambda: UniqueStreetAddressGenerator(), 500, id="street-address"),
    pytest.param(lambda: UniquePostcodeGenerator(), 500, id="postcode"),
    pytest.param(lambda: UniqueStateGenerator(), len(datasets.STATES), id="state"),
    pytest.param(lambda: UniqueIntervalGenerator(fields="month"), 78, id="interval-v1"),
    pytest.param(lambda: UniqueIntervalGeneratorV2(fields="month"), 78, id="interval-v2"),
    pytest.param(lambda: PhoneNumberGenerator(), 300, id="phone-prefixes"),
    pytest.param(lambda: PhoneNumberGenerator(template="+1 ###"), 1000, id="phone-template"),
    pytest.param(
        lambda: PhoneNumberGenerator(prefixes=["5", "55"], generated_digits_numbers=[2, 1]),
        100,
        id="phone-overlapping-prefixes",
    ),
    pytest.param(lambda: UniqueCompanyNameGenerator(), 500, id="company-name"),
    pytest.param(lambda: UniqueFullNameGenerator(), 500, id="full-name"),
    pytest.param(lambda: UniqueBitStringGenerator(dimensions=4), 16, id="bit-string"),
]


@pytest.mark.parametrize("factory, count", UNIQUE_CASES)
def test_unique_generators_never_repeat(factory, count):
    """Drawing ``count`` values from a unique generator gives ``count`` distinct values."""
    assert _distinct(_values(factory(), count, seed=7)) == count


@pytest.mark.parametrize("factory, count", UNIQUE_CASES)
def test_unique_generators_reject_count_over_capacity(factory, count):
    """One value more than the reported capacity fails at init."""
    generator = factory()
    max_count = generator.get_max_unique_count()
    assert max_count >= count
    with pytest.raises(CapacityError):
        generator.init(max_count + 1, 0)


@pytest.mark.parametrize(
    "plain, unique",
    [
        (PointGenerator, UniquePointGenerator),
        (LineGenerator, UniqueLineGenerator),
        (GeometryGenerator, UniqueGeometryGenerator),
        (VectorGenerator, UniqueVectorGenerator),
        (InetGenerator, UniqueInetGenerator),
        (CountryGenerator, UniqueCountryGenerator),
        (CityGenerator, UniqueCityGenerator),
        (StreetAddressGenerator, UniqueStreetAddressGenerator),
        (PostcodeGenerator, UniquePostcodeGenerator),
        (StateGenerator, UniqueStateGenerator),
        (IntervalGenerator, UniqueIntervalGenerator),
        (CompanyNameGenerator, UniqueCompanyNameGenerator),
        (FullNameGenerator, UniqueFullNameGenerator),
        (BitStringGenerator, UniqueBitStringGenerator),
    ],
)
def test_unique_columns_swap_in_unique_variant(plain, unique):
    """A generator on a unique column is replaced by its unique counterpart."""
    assert type(plain(is_unique=True).replace_if_unique()) is unique


def test_unique_line_fills_its_whole_capacity():
    """Every seed can draw the full capacity of lines, even when ``a`` and ``b`` both start at zero."""
    for seed in range(20):
        generator = UniqueLineGenerator(min_value=0, max_value=0.4)
        assert generator.get_max_unique_count() == 4
        lines = _values(generator, 4, seed=seed)
        assert _distinct(lines) == 4
        assert all(not (a == 0 and b == 0) for a, b, _ in lines)


def test_unique_line_capacity_leaves_room_for_redraw():
    """The coordinate range holds five values but only four lines are promised."""
    with pytest.raises(UniqueCountExceededError):
        UniqueLineGenerator(min_value=0, max_value=0.4).init(5, 0)


def test_street_addresses_do_not_repeat_across_name_pools():
    """Names that are both first and last names only come from one pool."""
    assert not set(STREET_SURNAMES) & set(datasets.FIRST_NAMES)
    assert _distinct(_values(UniqueStreetAddressGenerator(), 2000, seed=3)) == 2000


def test_json_documents_are_distinct():
    """Each document carries its own email, so documents don't repeat."""
    documents = _values(JsonGenerator(), 100)
    assert len({json.dumps(document, sort_keys=True) for document in documents}) == 100
    assert all(document["has_job"] == ("salary" in document) for document in documents)


def test_lorem_ipsum_sentences():
    """Each value holds ``sentences_count`` capitalised sentences."""
    values = _values(LoremIpsumGenerator(sentences_count=2), 50)
    assert len(set(values)) == 50
    for value in values:
        assert value.count(".") == 2
        assert value[0].isupper()


def test_plain_generators_have_no_unique_capacity_limit():
    """Free-form generators don't cap the row count."""
    assert JsonGenerator().get_max_unique_count() == math.inf
    assert LoremIpsumGenerator().get_max_unique_count() == math.inf
