"""Value generators for different column types."""

from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.geometry import (
    GeometryGenerator,
    InetGenerator,
    LineGenerator,
    PointGenerator,
    VectorGenerator,
)
from fraiseql_synth.generators.location import (
    CityGenerator,
    CountryGenerator,
    PostcodeGenerator,
    StateGenerator,
    StreetAddressGenerator,
)
from fraiseql_synth.generators.numeric import (
    BitStringGenerator,
    BooleanGenerator,
    IntGenerator,
    IntPrimaryKeyGenerator,
    NumberGenerator,
    UniqueIntGenerator,
)
from fraiseql_synth.generators.people import (
    CompanyNameGenerator,
    EmailGenerator,
    FirstNameGenerator,
    FullNameGenerator,
    JobTitleGenerator,
    LastNameGenerator,
    PhoneNumberGenerator,
)
from fraiseql_synth.generators.registry import (
    LATEST_VERSION,
    GeneratorRegistry,
    build_generator,
    clear_generators,
    get_generator,
    list_generators,
    register_generator,
    resolve_generator,
    select_generator,
)
from fraiseql_synth.generators.strings import (
    EnumGenerator,
    JsonGenerator,
    LoremIpsumGenerator,
    StringGenerator,
    UUIDGenerator,
)
from fraiseql_synth.generators.temporal import (
    DateGenerator,
    IntervalGenerator,
    TimeGenerator,
    TimestampGenerator,
    YearGenerator,
)
from fraiseql_synth.generators.wrappers import (
    ArrayGenerator,
    CompositeUniqueKeyGenerator,
    CustomGenerator,
    DefaultGenerator,
    HollowGenerator,
    ValuesFromArrayGenerator,
    WeightedRandomGenerator,
)

__all__ = [
    "AbstractGenerator",
    "ArrayGenerator",
    "BitStringGenerator",
    "BooleanGenerator",
    "CityGenerator",
    "CompanyNameGenerator",
    "CompositeUniqueKeyGenerator",
    "CountryGenerator",
    "CustomGenerator",
    "DateGenerator",
    "DefaultGenerator",
    "EmailGenerator",
    "EnumGenerator",
    "FirstNameGenerator",
    "FullNameGenerator",
    "GeneratorRegistry",
    "GeometryGenerator",
    "HollowGenerator",
    "InetGenerator",
    "IntGenerator",
    "IntPrimaryKeyGenerator",
    "IntervalGenerator",
    "JobTitleGenerator",
    "JsonGenerator",
    "LATEST_VERSION",
    "LastNameGenerator",
    "LineGenerator",
    "LoremIpsumGenerator",
    "NumberGenerator",
    "PhoneNumberGenerator",
    "PointGenerator",
    "PostcodeGenerator",
    "StateGenerator",
    "StreetAddressGenerator",
    "StringGenerator",
    "TimeGenerator",
    "TimestampGenerator",
    "UUIDGenerator",
    "UniqueIntGenerator",
    "ValuesFromArrayGenerator",
    "VectorGenerator",
    "WeightedRandomGenerator",
    "YearGenerator",
    "build_generator",
    "clear_generators",
    "get_generator",
    "list_generators",
    "register_generator",
    "resolve_generator",
    "select_generator",
]
