"""Points, lines, PostGIS geometries, vectors and network addresses."""

import math
from typing import Any

from fraiseql_synth.exceptions import GeneratorConfigError, UniqueCountExceededError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import (
    CartesianIndexSampler,
    NumberGenerator,
    UniqueNumberGenerator,
)
from fraiseql_synth.generators.wrappers import ArrayGenerator
from fraiseql_synth.utils import OrderedNumberRange

COORDINATE_PRECISION = 10


def _coordinate(generator_class: type[AbstractGenerator], params: dict[str, Any]) -> AbstractGenerator:
    return generator_class(
        min_value=params.get("min_value"),
        max_value=params.get("max_value"),
        precision=COORDINATE_PRECISION,
    )


def _format_point(data_type: str | None, x: float, y: float) -> Any:
    if data_type == "json":
        return {"x": x, "y": y}
    if data_type == "string":
        return f"({x},{y})"
    return [x, y]


def _format_line(data_type: str | None, a: float, b: float, c: float) -> Any:
    if data_type == "json":
        return {"a": a, "b": b, "c": c}
    if data_type == "string":
        return f"{{{a},{b},{c}}}"
    return [a, b, c]


class UniquePointGenerator(AbstractGenerator):
    kind = "unique_point"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return _coordinate(UniqueNumberGenerator, self.params).get_max_unique_count()

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        x = _coordinate(UniqueNumberGenerator, self.params)
        y = _coordinate(UniqueNumberGenerator, self.params)
        x.init(count, seed)
        y.init(count, seed + 1)
        self.state.update(x=x, y=y)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        return _format_point(self.data_type, state["x"].generate(), state["y"].generate())


class PointGenerator(AbstractGenerator):
    """Points with ``x`` and ``y`` in ``[min_value, max_value]``."""

    kind = "point"
    unique_version = UniquePointGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        coordinate = _coordinate(NumberGenerator, self.params)
        coordinate.init(count, seed)
        self.state["coordinate"] = coordinate

    def generate(self, i: int = 0, **context: Any) -> Any:
        coordinate = self._require_state()["coordinate"]
        return _format_point(self.data_type, coordinate.generate(), coordinate.generate())


class UniqueLineGenerator(AbstractGenerator):
    """
    Distinct lines ``ax + by + c = 0``.

    When ``a`` and ``b`` both come out zero another ``b`` is drawn, so the
    ``b`` pool holds one spare value and the capacity is one less than the
    coordinate range.
    """

    kind = "unique_line"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return _coordinate(UniqueNumberGenerator, self.params).get_max_unique_count() - 1

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("lines", max_count)
        coefficients = []
        for offset in range(3):
            generator = _coordinate(UniqueNumberGenerator, self.params)
            # b keeps a spare value for the a == b == 0 redraw
            generator.init(count + 1 if offset == 1 else count, seed + offset)
            coefficients.append(generator)
        self.state["coefficients"] = coefficients

    def generate(self, i: int = 0, **context: Any) -> Any:
        a, b, c = self._require_state()["coefficients"]
        a_value, b_value = a.generate(), b.generate()
        if a_value == 0 and b_value == 0:
            b_value = b.generate()
        return _format_line(self.data_type, a_value, b_value, c.generate())


class LineGenerator(AbstractGenerator):
    """Lines ``ax + by + c = 0``; ``a`` and ``b`` are never both zero."""

    kind = "line"
    unique_version = UniqueLineGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        coefficient = _coordinate(NumberGenerator, self.params)
        coefficient.init(count, seed)
        self.state["coefficient"] = coefficient

    def generate(self, i: int = 0, **context: Any) -> Any:
        coefficient = self._require_state()["coefficient"]
        a = coefficient.generate()
        b = coefficient.generate()
        while a == 0 and b == 0:
            b = coefficient.generate()
        return _format_line(self.data_type, a, b, coefficient.generate())


# srid -> (x bound, y bound, fixed denominator or None for 10**decimal_places)
GEOMETRY_BOUNDS: dict[int, tuple[int, int, int | None]] = {
    4326: (180, 90, None),
    3857: (20026376, 20048966, 1),
}


def _geometry_ranges(params: dict[str, Any]) -> tuple[OrderedNumberRange, OrderedNumberRange, int]:
    srid = params.get("srid") or 4326
    if params.get("type", "point") != "point":
        raise GeneratorConfigError("Only point geometries are supported.")
    if srid not in GEOMETRY_BOUNDS:
        raise GeneratorConfigError(f"Unsupported srid {srid}; use one of {sorted(GEOMETRY_BOUNDS)}.")
    x_bound, y_bound, denominator = GEOMETRY_BOUNDS[srid]
    if denominator is None:
        decimal_places = params.get("decimal_places")
        denominator = 10 ** (6 if decimal_places is None else decimal_places)
    return (
        OrderedNumberRange(-x_bound * denominator, x_bound * denominator),
        OrderedNumberRange(-y_bound * denominator, y_bound * denominator),
        denominator,
    )


def _format_geometry(data_type: str | None, x: float, y: float) -> Any:
    if data_type == "json":
        return {"x": x, "y": y}
    if data_type == "string":
        return f"POINT({x} {y})"
    return [x, y]


class UniqueGeometryGenerator(AbstractGenerator):
    kind = "unique_geometry"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        x_range, y_range, _ = _geometry_ranges(self.params)
        return len(x_range) * len(y_range)

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        x_range, y_range, denominator = _geometry_ranges(self.params)
        sampler = CartesianIndexSampler([[x_range, y_range]])
        if count > sampler.max_count:
            raise UniqueCountExceededError("geometries", sampler.max_count)
        sampler.init(count, seed)
        self.state.update(sampler=sampler, denominator=denominator)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        _, (x, y) = state["sampler"].next(self._draw)
        denominator = state["denominator"]
        return _format_geometry(self.data_type, x / denominator, y / denominator)


class GeometryGenerator(AbstractGenerator):
    """
    PostGIS points in srid 4326 (degrees, ``decimal_places`` digits) or 3857
    (metres).
    """

    kind = "geometry"
    unique_version = UniqueGeometryGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        x_range, y_range, denominator = _geometry_ranges(self.params)
        self.state.update(x_range=x_range, y_range=y_range, denominator=denominator)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        x = state["x_range"].at(self._draw(0, len(state["x_range"]) - 1))
        y = state["y_range"].at(self._draw(0, len(state["y_range"]) - 1))
        denominator = state["denominator"]
        return _format_geometry(self.data_type, x / denominator, y / denominator)


def _vector_settings(generator: AbstractGenerator) -> tuple[int, int, int, int]:
    params = generator.params
    dimensions = params.get("dimensions") or generator.type_params.length or 3
    min_value = params.get("min_value", -1000)
    max_value = params.get("max_value", 1000)
    decimal_places = params.get("decimal_places", 2)
    if min_value > max_value:
        raise GeneratorConfigError(f"min_value ({min_value}) is greater than max_value ({max_value}).")
    if decimal_places < 0:
        raise GeneratorConfigError("decimal_places can't be negative.")
    return dimensions, min_value, max_value, decimal_places


def _format_vector(data_type: str | None, elements: list[float]) -> Any:
    if data_type == "string":
        return "[" + ",".join(str(element) for element in elements) + "]"
    return elements


class UniqueVectorGenerator(AbstractGenerator):
    kind = "unique_vector"
    is_generator_unique = True

    def _element_range(self) -> tuple[int, OrderedNumberRange, int]:
        dimensions, min_value, max_value, decimal_places = _vector_settings(self)
        denominator = 10**decimal_places
        element_range = OrderedNumberRange(
            math.ceil(min_value * denominator), math.floor(max_value * denominator)
        )
        return dimensions, element_range, denominator

    def get_max_unique_count(self) -> int | float:
        dimensions, element_range, _ = self._element_range()
        return len(element_range) ** dimensions

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        dimensions, element_range, denominator = self._element_range()
        sampler = CartesianIndexSampler([[element_range] * dimensions])
        if count > sampler.max_count:
            raise UniqueCountExceededError("vectors", sampler.max_count)
        sampler.init(count, seed)
        self.state.update(sampler=sampler, denominator=denominator)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        _, elements = state["sampler"].next(self._draw)
        return _format_vector(self.data_type, [element / state["denominator"] for element in elements])


class VectorGenerator(AbstractGenerator):
    """Vectors of ``dimensions`` floats in ``[min_value, max_value]``."""

    kind = "vector"
    unique_version = UniqueVectorGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        dimensions, min_value, max_value, decimal_places = _vector_settings(self)
        element = NumberGenerator(
            min_value=min_value, max_value=max_value, precision=10**decimal_places
        )
        array = ArrayGenerator(base_column_gen=element, size=dimensions)
        array.init(count, seed)
        self.state["array"] = array

    def generate(self, i: int = 0, **context: Any) -> Any:
        return _format_vector(self.data_type, self._require_state()["array"].generate(i))


def _inet_settings(params: dict[str, Any]) -> tuple[str, bool]:
    ip_address = params.get("ip_address", "ipv4")
    if ip_address not in ("ipv4", "ipv6"):
        raise GeneratorConfigError(f"ip_address should be 'ipv4' or 'ipv6', got {ip_address!r}.")
    return ip_address, params.get("include_cidr", True)


def _inet_pool(ip_address: str, include_cidr: bool) -> list:
    if ip_address == "ipv4":
        pool = [OrderedNumberRange(0, 255)] * 4
        cidr = OrderedNumberRange(0, 32)
    else:
        pool = [OrderedNumberRange(0, 65535)] * 8
        cidr = OrderedNumberRange(0, 128)
    return pool + [cidr] if include_cidr else pool


def _format_inet(ip_address: str, include_cidr: bool, tokens: list[int]) -> str:
    parts = tokens[:-1] if include_cidr else tokens
    if ip_address == "ipv4":
        address = ".".join(str(part) for part in parts)
    else:
        address = ":".join(format(part, "x") for part in parts)
    return f"{address}/{tokens[-1]}" if include_cidr else address


class UniqueInetGenerator(AbstractGenerator):
    kind = "unique_inet"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return CartesianIndexSampler([_inet_pool(*_inet_settings(self.params))]).max_count

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        ip_address, include_cidr = _inet_settings(self.params)
        sampler = CartesianIndexSampler([_inet_pool(ip_address, include_cidr)])
        if count > sampler.max_count:
            raise UniqueCountExceededError("inet addresses", sampler.max_count)
        sampler.init(count, seed)
        self.state.update(sampler=sampler, ip_address=ip_address, include_cidr=include_cidr)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        _, tokens = state["sampler"].next(self._draw)
        return _format_inet(state["ip_address"], state["include_cidr"], tokens)


class InetGenerator(AbstractGenerator):
    """IPv4 or IPv6 addresses, with a CIDR suffix unless ``include_cidr=False``."""

    kind = "inet"
    unique_version = UniqueInetGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        ip_address, include_cidr = _inet_settings(self.params)
        self.state.update(ip_address=ip_address, include_cidr=include_cidr)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        pool = _inet_pool(state["ip_address"], state["include_cidr"])
        tokens = [tokens_range.at(self._draw(0, len(tokens_range) - 1)) for tokens_range in pool]
        return _format_inet(state["ip_address"], state["include_cidr"], tokens)
