"""Versioned generator registry."""

from typing import Any

from fraiseql_synth.exceptions import GeneratorConfigError, UnknownGeneratorError
from fraiseql_synth.generators import geometry, location, numeric, people, strings, temporal, wrappers
from fraiseql_synth.generators.base import AbstractGenerator

LATEST_VERSION = 4

BUILTIN_GENERATORS: list[type[AbstractGenerator]] = [
    wrappers.DefaultGenerator,
    wrappers.HollowGenerator,
    wrappers.HashFromStringGenerator,
    wrappers.HashFromStringGeneratorV3,
    wrappers.ArrayGenerator,
    wrappers.WeightedCountGenerator,
    wrappers.ValuesFromArrayGenerator,
    wrappers.SelfRelationsValuesFromArrayGenerator,
    wrappers.WeightedRandomGenerator,
    wrappers.CompositeUniqueKeyGenerator,
    wrappers.CustomGenerator,
    numeric.IntPrimaryKeyGenerator,
    numeric.NumberGenerator,
    numeric.UniqueNumberGenerator,
    numeric.IntGenerator,
    numeric.UniqueIntGenerator,
    numeric.BooleanGenerator,
    numeric.BitStringGenerator,
    numeric.UniqueBitStringGenerator,
    temporal.DateGenerator,
    temporal.TimeGenerator,
    temporal.TimestampGenerator,
    temporal.DatetimeGenerator,
    temporal.TimestampIntGenerator,
    temporal.YearGenerator,
    temporal.IntervalGenerator,
    temporal.UniqueIntervalGenerator,
    temporal.UniqueIntervalGeneratorV2,
    strings.StringGenerator,
    strings.StringGeneratorV2,
    strings.UniqueStringGenerator,
    strings.UniqueStringGeneratorV2,
    strings.UUIDGenerator,
    strings.UUIDGeneratorV4,
    strings.EnumGenerator,
    strings.LoremIpsumGenerator,
    strings.JsonGenerator,
    people.FirstNameGenerator,
    people.UniqueFirstNameGenerator,
    people.LastNameGenerator,
    people.UniqueLastNameGenerator,
    people.FullNameGenerator,
    people.UniqueFullNameGenerator,
    people.EmailGenerator,
    people.JobTitleGenerator,
    people.PhoneNumberGenerator,
    people.CompanyNameGenerator,
    people.UniqueCompanyNameGenerator,
    location.CountryGenerator,
    location.UniqueCountryGenerator,
    location.CityGenerator,
    location.UniqueCityGenerator,
    location.StreetAddressGenerator,
    location.UniqueStreetAddressGenerator,
    location.PostcodeGenerator,
    location.UniquePostcodeGenerator,
    location.StateGenerator,
    location.UniqueStateGenerator,
    geometry.PointGenerator,
    geometry.UniquePointGenerator,
    geometry.LineGenerator,
    geometry.UniqueLineGenerator,
    geometry.GeometryGenerator,
    geometry.UniqueGeometryGenerator,
    geometry.VectorGenerator,
    geometry.UniqueVectorGenerator,
    geometry.InetGenerator,
    geometry.UniqueInetGenerator,
]


class GeneratorRegistry:
    """
    Explicit ``kind -> {version: generator class}`` table.

    Several implementations of one kind can coexist; ``select`` returns the
    newest one allowed by the requested API version, so data generated for
    an older version stays reproducible.
    """

    def __init__(self):
        self._generators: dict[str, dict[int, type[AbstractGenerator]]] = {}

    def register(self, kind: str, generator_class: type) -> None:
        """
        Register a generator implementation under ``kind``.

        The version is read from ``generator_class.version`` (default 1).

        Raises:
            ValueError: If generator class doesn't have generate method
        """
        if not callable(getattr(generator_class, "generate", None)):
            raise ValueError(
                f"Generator class must have 'generate' method. "
                f"Class {generator_class.__name__} is missing it."
            )
        version = getattr(generator_class, "version", 1)
        self._generators.setdefault(kind, {})[version] = generator_class

    def get(self, kind: str) -> type[AbstractGenerator] | None:
        """Newest registered implementation of ``kind``, or None."""
        versions = self._generators.get(kind)
        if not versions:
            return None
        return versions[max(versions)]

    def versions(self, kind: str) -> list[int]:
        return sorted(self._generators.get(kind, {}))

    def select(self, kind: str, api_version: int) -> type[AbstractGenerator]:
        """
        Pick the highest version of ``kind`` that is ``<= api_version``.

        Raises:
            UnknownGeneratorError: If ``kind`` is not registered
            GeneratorConfigError: If every registered version is newer
        """
        versions = self._generators.get(kind)
        if not versions:
            raise UnknownGeneratorError(kind, self.list_generators())
        eligible = [version for version in versions if version <= api_version]
        if not eligible:
            raise GeneratorConfigError(
                f"No version of generator '{kind}' is available for API version {api_version}."
            )
        return versions[max(eligible)]

    def resolve(self, generator: AbstractGenerator, api_version: int) -> AbstractGenerator:
        """
        Return ``generator`` rebuilt with the implementation for ``api_version``.

        Array generators re-resolve their base generator as well. Generators
        whose kind is not registered are returned unchanged.
        """
        if generator.kind not in self._generators:
            return generator

        params = generator.params
        if generator.kind == "array" and "base_column_gen" in params:
            base = params["base_column_gen"]
            resolved_base = self.resolve(base, api_version)
            if resolved_base is not base:
                params = {**params, "base_column_gen": resolved_base}

        generator_class = self.select(generator.kind, api_version)
        if generator_class is type(generator) and params is generator.params:
            return generator

        resolved = generator_class(**params)
        resolved.copy_flags_from(generator)
        return resolved

    def list_generators(self) -> list[str]:
        return list(self._generators.keys())

    def clear(self) -> None:
        self._generators.clear()


def register_builtin_generators(registry: GeneratorRegistry) -> None:
    for generator_class in BUILTIN_GENERATORS:
        registry.register(generator_class.kind, generator_class)


# Global registry instance
_registry = GeneratorRegistry()
register_builtin_generators(_registry)


def get_registry() -> GeneratorRegistry:
    return _registry


def register_generator(kind: str, generator_class: type) -> None:
    """
    Register a custom generator (user-facing API).

    Args:
        kind: Generator kind, used in refinement files
        generator_class: AbstractGenerator subclass

    Example:
        >>> from fraiseql_synth import AbstractGenerator, register_generator
        >>>
        >>> class SkuGenerator(AbstractGenerator):
        ...     kind = "sku"
        ...
        ...     def generate(self, i=0, **context):
        ...         return f"SKU-{i + 1:06d}"
        >>>
        >>> register_generator("sku", SkuGenerator)
    """
    _registry.register(kind, generator_class)


def get_generator(kind: str) -> type[AbstractGenerator] | None:
    return _registry.get(kind)


def list_generators() -> list[str]:
    return _registry.list_generators()


def select_generator(kind: str, api_version: int = LATEST_VERSION) -> type[AbstractGenerator]:
    return _registry.select(kind, api_version)


def resolve_generator(generator: AbstractGenerator, api_version: int) -> AbstractGenerator:
    return _registry.resolve(generator, api_version)


def build_generator(kind: str, **params: Any) -> AbstractGenerator:
    """
    Construct a generator by kind with the newest implementation.

    The plan builder re-resolves it to the requested API version later.

    Example:
        >>> build_generator("int", min_value=1, max_value=10)
        IntGenerator(kind='int', version=1)
    """
    return select_generator(kind)(**params)


def clear_generators() -> None:
    """Drop custom generators and restore the built-in ones (for testing)."""
    _registry.clear()
    register_builtin_generators(_registry)
