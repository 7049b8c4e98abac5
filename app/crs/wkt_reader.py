"""Recursive-descent reader for OGC WKT.

The text is first read into a generic ``WktNode`` tree (keyword, arguments,
position), then each node is turned into a model object or a math transform
by the builder registered for its keyword. Clause order inside ``PROJCS`` is
free: ``UNIT`` may come before or after ``PROJECTION``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from projections.registry import ProjectionRegistry, build_default_registry
from transforms.affine import AffineTransform
from transforms.base import InverseTransform, MathTransform
from transforms.concatenated import ConcatenatedTransform
from transforms.datum import DatumTransform
from transforms.geocentric import GeocentricTransform
from transforms.projection import ProjectionTransform

from .errors import ParseError, UnknownProjectionError
from .model import (
    DEGREE,
    METRE,
    AngularUnit,
    AxisInfo,
    AxisOrientation,
    CompoundCoordinateSystem,
    CoordinateSystem,
    DatumType,
    Ellipsoid,
    FittedCoordinateSystem,
    GeocentricCoordinateSystem,
    GeographicCoordinateSystem,
    HorizontalDatum,
    Info,
    LinearUnit,
    PrimeMeridian,
    Projection,
    ProjectedCoordinateSystem,
    VerticalCoordinateSystem,
    VerticalDatum,
    Wgs84ConversionInfo,
)
from .parameters import ParameterSetBuilder
from .wkt_tokenizer import CLOSERS, TokenStream, TokenType, fragment_at

logger = logging.getLogger(__name__)


class Word(str):
    """Unquoted identifier argument, e.g. the orientation in ``AXIS["X", EAST]``."""


Arg = Union[str, float, "WktNode"]


@dataclass
class WktNode:
    keyword: str
    args: List[Arg] = field(default_factory=list)
    position: int = 0
    fragment: str = ""

    def children(self, keyword: str) -> List["WktNode"]:
        return [a for a in self.args if isinstance(a, WktNode) and a.keyword == keyword]

    def child(self, keyword: str) -> Optional["WktNode"]:
        found = self.children(keyword)
        return found[0] if found else None


# -----------------------------
# Tree
# -----------------------------


def read_tree(text: str) -> WktNode:
    if not text or not text.strip():
        raise ParseError("Empty WKT")
    stream = TokenStream(text)
    node = _read_node(stream)
    tail = stream.peek()
    if tail.type is not TokenType.EOF:
        stream.fail("Unexpected trailing input", tail)
    return node


def _read_node(stream: TokenStream) -> WktNode:
    head = stream.expect(TokenType.WORD, "keyword")
    opener = stream.expect(TokenType.OPEN, f"'[' after {head.text}")
    node = WktNode(head.text.upper(), [], head.position, fragment_at(stream.text, head.position))
    closer = CLOSERS[opener.text]

    if stream.peek().type is TokenType.CLOSE:
        _close(stream, closer)
        return node

    while True:
        node.args.append(_read_arg(stream))
        tok = stream.peek()
        if tok.type is TokenType.COMMA:
            stream.next()
            # a trailing comma before the closer is tolerated
            if stream.peek().type is TokenType.CLOSE:
                break
            continue
        if tok.type is TokenType.CLOSE:
            break
        stream.fail(f"Expected ',' or '{closer}' in {node.keyword}", tok)
    _close(stream, closer)
    return node


def _close(stream: TokenStream, closer: str) -> None:
    tok = stream.expect(TokenType.CLOSE, f"'{closer}'")
    if tok.text != closer:
        stream.fail(f"Mismatched bracket, expected '{closer}'", tok)


def _read_arg(stream: TokenStream) -> Arg:
    tok = stream.peek()
    if tok.type is TokenType.STRING:
        stream.next()
        return tok.value
    if tok.type is TokenType.NUMBER:
        stream.next()
        return tok.value
    if tok.type is TokenType.WORD:
        if stream.peek(1).type is TokenType.OPEN:
            return _read_node(stream)
        stream.next()
        return Word(tok.text)
    stream.fail("Expected a string, number or clause", tok)
    raise AssertionError("unreachable")


# -----------------------------
# Reader
# -----------------------------


class WktReader:
    """Builds model objects and math transforms from WKT text."""

    def __init__(self, projections: Optional[ProjectionRegistry] = None):
        self.projections = projections or build_default_registry()
        self._builders: Dict[str, Callable[[WktNode], object]] = {
            "UNIT": self._unit,
            "SPHEROID": self._ellipsoid,
            "ELLIPSOID": self._ellipsoid,
            "PRIMEM": self._prime_meridian,
            "DATUM": self._datum,
            "VERT_DATUM": self._vertical_datum,
            "GEOGCS": self._geographic,
            "PROJCS": self._projected,
            "GEOCCS": self._geocentric,
            "VERT_CS": self._vertical,
            "COMPD_CS": self._compound,
            "FITTED_CS": self._fitted,
            "PARAM_MT": self._param_mt,
            "INVERSE_MT": self._inverse_mt,
            "CONCAT_MT": self._concat_mt,
        }

    def parse(self, text: str) -> Union[Info, MathTransform]:
        return self._build(read_tree(text))

    def parse_coordinate_system(self, text: str) -> CoordinateSystem:
        result = self.parse(text)
        if not isinstance(result, CoordinateSystem):
            raise ParseError(f"Expected a coordinate system, got {type(result).__name__}", fragment_at(text, 0), 0)
        return result

    def parse_math_transform(self, text: str) -> MathTransform:
        result = self.parse(text)
        if not isinstance(result, MathTransform):
            raise ParseError(f"Expected a math transform, got {type(result).__name__}", fragment_at(text, 0), 0)
        return result

    # -----------------------------
    # Helpers
    # -----------------------------

    def _fail(self, message: str, node: WktNode) -> ParseError:
        return ParseError(message, node.fragment, node.position)

    def _build(self, node: WktNode) -> object:
        if node.keyword == "LOCAL_CS":
            raise self._fail("LOCAL_CS coordinate systems are not supported", node)
        builder = self._builders.get(node.keyword)
        if builder is None:
            raise self._fail(f"'{node.keyword}' is not recognized", node)
        return builder(node)

    def _string(self, node: WktNode, index: int) -> str:
        if index >= len(node.args) or not isinstance(node.args[index], str):
            raise self._fail(f"{node.keyword} argument {index + 1} must be a quoted string", node)
        return str(node.args[index])

    def _number(self, node: WktNode, index: int) -> float:
        value = node.args[index] if index < len(node.args) else None
        if isinstance(value, str) and not isinstance(value, Word):
            # some writers quote numbers
            try:
                return float(value)
            except ValueError:
                pass
        if not isinstance(value, float):
            raise self._fail(f"{node.keyword} argument {index + 1} must be a number", node)
        return value

    def _required(self, node: WktNode, keyword: str) -> WktNode:
        child = node.child(keyword)
        if child is None:
            raise self._fail(f"{node.keyword} is missing {keyword}", node)
        return child

    def _info(self, node: WktNode) -> Dict[str, object]:
        """Name plus AUTHORITY of a clause, as keyword arguments for Info."""
        info: Dict[str, object] = {"name": self._string(node, 0)}
        auth = node.child("AUTHORITY")
        if auth is not None:
            info["authority"] = self._string(auth, 0)
            info["authority_code"] = self._authority_code(auth)
        return info

    def _authority_code(self, node: WktNode) -> int:
        if len(node.args) < 2:
            raise self._fail("AUTHORITY needs a name and a code", node)
        raw = node.args[1]
        if isinstance(raw, WktNode):
            raise self._fail("AUTHORITY code must be a string or number", node)
        try:
            return int(float(raw))
        except ValueError:
            logger.debug("wkt.authority_code_not_numeric code=%s", raw)
            return -1

    def _axes(self, node: WktNode) -> tuple:
        return tuple(self._axis(a) for a in node.children("AXIS"))

    def _axis(self, node: WktNode) -> AxisInfo:
        name = self._string(node, 0)
        if len(node.args) < 2 or isinstance(node.args[1], (float, WktNode)):
            raise self._fail("AXIS needs a name and an orientation", node)
        word = str(node.args[1]).upper()
        try:
            orientation = AxisOrientation(word)
        except ValueError:
            raise self._fail(f"Invalid axis orientation '{word}'", node) from None
        return AxisInfo(name, orientation)

    # -----------------------------
    # Units, ellipsoid, datums
    # -----------------------------

    def _unit(self, node: WktNode) -> LinearUnit:
        # a bare UNIT is read as linear; callers that know better use _angular_unit
        return LinearUnit(meters_per_unit=self._number(node, 1), **self._info(node))

    def _angular_unit(self, node: WktNode) -> AngularUnit:
        return AngularUnit(radians_per_unit=self._number(node, 1), **self._info(node))

    def _linear_unit(self, node: Optional[WktNode]) -> LinearUnit:
        return METRE if node is None else self._unit(node)

    def _ellipsoid(self, node: WktNode) -> Ellipsoid:
        try:
            return Ellipsoid(
                semi_major=self._number(node, 1), inverse_flattening=self._number(node, 2), **self._info(node)
            )
        except ValueError as exc:
            raise self._fail(str(exc), node) from exc

    def _prime_meridian(self, node: WktNode) -> PrimeMeridian:
        # longitude is taken in degrees whatever the enclosing GEOGCS unit is
        return PrimeMeridian(longitude=self._number(node, 1), angular_unit=DEGREE, **self._info(node))

    def _towgs84(self, node: WktNode) -> Wgs84ConversionInfo:
        count = len(node.args)
        if count not in (3, 6, 7):
            raise self._fail(f"TOWGS84 takes 3, 6 or 7 values, got {count}", node)
        values = [self._number(node, i) for i in range(count)]
        return Wgs84ConversionInfo(*values)

    def _datum(self, node: WktNode) -> HorizontalDatum:
        spheroid = node.child("SPHEROID") or node.child("ELLIPSOID")
        if spheroid is None:
            raise self._fail("DATUM is missing SPHEROID", node)
        towgs84 = node.child("TOWGS84")
        return HorizontalDatum(
            ellipsoid=self._ellipsoid(spheroid),
            towgs84=None if towgs84 is None else self._towgs84(towgs84),
            datum_type=DatumType.HD_GEOCENTRIC,
            **self._info(node),
        )

    def _vertical_datum(self, node: WktNode) -> VerticalDatum:
        code = int(self._number(node, 1))
        try:
            datum_type = DatumType(code)
        except ValueError:
            raise self._fail(f"Unknown vertical datum type {code}", node) from None
        return VerticalDatum(datum_type=datum_type, **self._info(node))

    # -----------------------------
    # Coordinate systems
    # -----------------------------

    def _geographic(self, node: WktNode) -> GeographicCoordinateSystem:
        kwargs = dict(
            angular_unit=self._angular_unit(self._required(node, "UNIT")),
            datum=self._datum(self._required(node, "DATUM")),
            prime_meridian=self._prime_meridian(self._required(node, "PRIMEM")),
            **self._info(node),
        )
        axes = self._axes(node)
        if axes:
            kwargs["axes"] = axes
        return GeographicCoordinateSystem(**kwargs)

    def _projected(self, node: WktNode) -> ProjectedCoordinateSystem:
        geographic = self._geographic(self._required(node, "GEOGCS"))
        proj_node = self._required(node, "PROJECTION")
        class_name = self._string(proj_node, 0)
        if not self.projections.is_registered(class_name):
            raise UnknownProjectionError(class_name)

        builder = ParameterSetBuilder()
        for param in node.children("PARAMETER"):
            builder.add(self._string(param, 0), self._number(param, 1))
        projection = Projection(class_name=class_name, parameters=builder.build(), **self._info(proj_node))

        kwargs = dict(
            geographic=geographic,
            projection=projection,
            linear_unit=self._linear_unit(node.child("UNIT")),
            **self._info(node),
        )
        axes = self._axes(node)
        if axes:
            kwargs["axes"] = axes
        return ProjectedCoordinateSystem(**kwargs)

    def _geocentric(self, node: WktNode) -> GeocentricCoordinateSystem:
        kwargs = dict(
            datum=self._datum(self._required(node, "DATUM")),
            prime_meridian=self._prime_meridian(self._required(node, "PRIMEM")),
            linear_unit=self._linear_unit(node.child("UNIT")),
            **self._info(node),
        )
        axes = self._axes(node)
        if axes:
            kwargs["axes"] = axes
        return GeocentricCoordinateSystem(**kwargs)

    def _vertical(self, node: WktNode) -> VerticalCoordinateSystem:
        kwargs = dict(
            datum=self._vertical_datum(self._required(node, "VERT_DATUM")),
            linear_unit=self._linear_unit(node.child("UNIT")),
            **self._info(node),
        )
        axes = self._axes(node)
        if axes:
            kwargs["axes"] = axes[:1]
        return VerticalCoordinateSystem(**kwargs)

    def _compound(self, node: WktNode) -> CompoundCoordinateSystem:
        parts = [a for a in node.args[1:] if isinstance(a, WktNode) and a.keyword != "AUTHORITY"]
        if len(parts) != 2:
            raise self._fail("COMPD_CS needs a head and a tail coordinate system", node)
        head, tail = (self._coordinate_system(p) for p in parts)
        return CompoundCoordinateSystem(head=head, tail=tail, **self._info(node))

    def _fitted(self, node: WktNode) -> FittedCoordinateSystem:
        if len(node.args) < 3 or not all(isinstance(a, WktNode) for a in node.args[1:3]):
            raise self._fail("FITTED_CS needs a to-base transform and a base coordinate system", node)
        to_base = self._math_transform(node.args[1])
        base = self._coordinate_system(node.args[2])
        return FittedCoordinateSystem(base=base, to_base=to_base, **self._info(node))

    def _coordinate_system(self, node: WktNode) -> CoordinateSystem:
        result = self._build(node)
        if not isinstance(result, CoordinateSystem):
            raise self._fail(f"{node.keyword} is not a coordinate system", node)
        return result

    # -----------------------------
    # Math transforms
    # -----------------------------

    def _math_transform(self, node: WktNode) -> MathTransform:
        if node.keyword not in ("PARAM_MT", "INVERSE_MT", "CONCAT_MT"):
            raise self._fail(f"{node.keyword} is not a math transform", node)
        return self._build(node)

    def _param_mt(self, node: WktNode) -> MathTransform:
        name = self._string(node, 0)
        builder = ParameterSetBuilder()
        for param in node.children("PARAMETER"):
            builder.add(self._string(param, 0), self._number(param, 1))
        params = builder.build()
        kind = name.lower()

        if kind == "affine":
            num_row = int(params.optional("num_row", 3))
            num_col = int(params.optional("num_col", 3))
            elements = {}
            for p in params:
                key = p.name.lower()
                if key.startswith("elt_"):
                    try:
                        i, j = (int(v) for v in key[4:].split("_"))
                    except ValueError:
                        raise self._fail(f"Bad affine element name '{p.name}'", node) from None
                    if i >= num_row or j >= num_col:
                        raise self._fail(f"Affine element '{p.name}' outside {num_row}x{num_col}", node)
                    elements[(i, j)] = p.value
            return AffineTransform.from_elements(num_row, num_col, elements)

        if kind in ("ellipsoid_to_geocentric", "geocentric_to_ellipsoid"):
            return GeocentricTransform(
                params.value("semi_major"),
                params.value("semi_minor"),
                inverse=kind == "geocentric_to_ellipsoid",
            )

        if kind == "bursa_wolf":
            towgs84 = Wgs84ConversionInfo(
                *(params.optional(n, 0.0) for n in ("dx", "dy", "dz", "ex", "ey", "ez", "ppm"))
            )
            return DatumTransform(towgs84)

        # anything else names a map projection
        return ProjectionTransform(self.projections.create(name, params))

    def _inverse_mt(self, node: WktNode) -> MathTransform:
        inner = [a for a in node.args if isinstance(a, WktNode)]
        if len(inner) != 1:
            raise self._fail("INVERSE_MT wraps exactly one transform", node)
        return InverseTransform(self._math_transform(inner[0]))

    def _concat_mt(self, node: WktNode) -> MathTransform:
        children = [self._math_transform(a) for a in node.args if isinstance(a, WktNode)]
        try:
            return ConcatenatedTransform(children)
        except ValueError as exc:
            raise self._fail(str(exc), node) from exc


# -----------------------------
# Module-level conveniences
# -----------------------------

_default_reader: Optional[WktReader] = None


def _reader() -> WktReader:
    global _default_reader
    if _default_reader is None:
        _default_reader = WktReader()
    return _default_reader


def parse(text: str) -> Union[Info, MathTransform]:
    return _reader().parse(text)


def parse_coordinate_system(text: str) -> CoordinateSystem:
    return _reader().parse_coordinate_system(text)


def parse_math_transform(text: str) -> MathTransform:
    return _reader().parse_math_transform(text)


__all__ = [
    "Word",
    "WktNode",
    "read_tree",
    "WktReader",
    "parse",
    "parse_coordinate_system",
    "parse_math_transform",
]
