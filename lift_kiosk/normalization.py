from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from .errors import ParseError
from .logging import get_logger

logger = get_logger(__name__)

Converter = Callable[[Any], Any]
PathKey = Union[str, int]

PLACEHOLDER = "--"


def _walk(payload: Any, path: Sequence[PathKey]) -> Any:
    """Follow ``path`` through nested dicts/lists, yielding ``None`` when a step is absent."""
    node = payload
    for key in path:
        if node is None:
            return None
        if isinstance(key, int):
            if not isinstance(node, list):
                raise ParseError(f"expected a list at {key!r}, got {type(node).__name__}")
            node = node[key] if -len(node) <= key < len(node) else None
        else:
            if not isinstance(node, Mapping):
                raise ParseError(f"expected an object at {key!r}, got {type(node).__name__}")
            node = node.get(key)
    return node


@dataclass(frozen=True)
class FieldMapping:
    """Describes how to pull and transform a raw metric into a normalized field."""

    source: Tuple[PathKey, ...]
    converter: Optional[Converter] = None
    transform: Optional[Converter] = None

    def extract(self, payload: Any) -> Any:
        value = _walk(payload, self.source)
        if self.transform:
            value = self.transform(value)
        if self.converter and value is not None:
            value = self.converter(value)
        return value


class PayloadNormalizer:
    """Extracts report fields from a decoded payload, one field at a time.

    A field that cannot be extracted is logged and left ``None`` without
    affecting its siblings.
    """

    def __init__(self, mappings: Mapping[str, FieldMapping]) -> None:
        self._mappings: Dict[str, FieldMapping] = dict(mappings)

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self._mappings)

    def normalize(self, payload: Any, *, source: str = "") -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for name, mapping in self._mappings.items():
            try:
                values[name] = mapping.extract(payload)
            except Exception as exc:
                logger.warning("parse.field_failed", source=source, field=name, error=str(exc))
                values[name] = None
        return values


def c_to_f(value: Any) -> Optional[float]:
    if value is None:
        return None
    return (float(value) * 9 / 5) + 32


def temperature_to_f(value: Any, unit_code: Optional[str]) -> Optional[float]:
    """Normalize a station reading; anything not tagged ``degF`` is taken as Celsius."""
    if value is None:
        return None
    if unit_code and unit_code.endswith("degF"):
        return float(value)
    return c_to_f(value)


def snow_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ParseError(f"expected a snow amount, got {type(value).__name__}")
    return str(value)


def format_temperature(value: Optional[float]) -> str:
    # The temperature LCD has three characters.
    if value is None:
        return PLACEHOLDER
    if value < 0 or round(value) >= 100:
        return str(int(round(value)))
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def compress_range(value: Optional[str]) -> str:
    if value is None:
        return PLACEHOLDER
    tokens = value.split("-")
    if len(tokens) == 1:
        return tokens[0]
    return tokens[0] + "+"
