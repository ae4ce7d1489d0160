"""Format transformation between plain JSON and the wrapped (Bedrock) convention.

In the wrapped convention every value is carried as::

    {"type": "text", "text": <value>}

Both directions are expressed through one recursive visitor, :func:`visit`.

Wrapping rule: bottom-up. Scalars are wrapped, containers are rebuilt from
their wrapped children and then wrapped themselves, except the outermost
container, which stays bare so it can sit directly in a JSON-RPC envelope.
Wrapping never looks for an existing envelope, so wrapping twice nests
twice. That keeps ``unwrap(wrap(x)) == x`` for every JSON value.

Unwrapping is lenient: objects that do not match the envelope shape pass
through (with their children unwrapped), so plain input is accepted even
when the wrapped convention is configured.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator

WRAPPED_TYPE = "text"
_WRAPPED_KEYS = frozenset({"type", "text"})

_FORMAT_ALIASES = {
    "standard": "plain",
    "bedrock": "wrapped",
}


class WireFormat(str, Enum):
    """JSON convention used on one side of the dispatcher."""

    PLAIN = "plain"
    WRAPPED = "wrapped"

    @classmethod
    def _missing_(cls, value: object) -> WireFormat | None:
        if isinstance(value, str):
            name = value.lower()
            name = _FORMAT_ALIASES.get(name, name)
            for member in cls:
                if member.value == name:
                    return member
        return None


def parse_format(value: str | WireFormat) -> WireFormat:
    """Parse a format name; ``standard`` and ``bedrock`` are accepted as aliases."""
    try:
        return WireFormat(value)
    except ValueError as exc:
        msg = f"Unknown wire format: {value!r}"
        raise ValueError(msg) from exc


class FormatConfig(BaseModel):
    """Input/output convention pair. Immutable once built."""

    model_config = {"frozen": True}

    input_format: WireFormat = WireFormat.PLAIN
    output_format: WireFormat = WireFormat.PLAIN

    @field_validator("input_format", "output_format", mode="before")
    @classmethod
    def _accept_aliases(cls, value: Any) -> Any:
        return parse_format(value) if isinstance(value, str) else value

    @classmethod
    def plain(cls) -> FormatConfig:
        return cls()

    @classmethod
    def wrapped(cls) -> FormatConfig:
        return cls(input_format=WireFormat.WRAPPED, output_format=WireFormat.WRAPPED)

    @classmethod
    def plain_to_wrapped(cls) -> FormatConfig:
        """Accept plain params, produce wrapped results."""
        return cls(input_format=WireFormat.PLAIN, output_format=WireFormat.WRAPPED)

    @classmethod
    def wrapped_to_plain(cls) -> FormatConfig:
        """Accept wrapped params, produce plain results."""
        return cls(input_format=WireFormat.WRAPPED, output_format=WireFormat.PLAIN)


# ---------------------------------------------------------------------------
# Tree walking
# ---------------------------------------------------------------------------

EnterFn = Callable[[Any], Any]
NodeFn = Callable[[Any, bool], Any]


def visit(
    value: Any,
    *,
    enter: EnterFn,
    leaf: NodeFn,
    composite: NodeFn,
    _root: bool = True,
) -> Any:
    """Rebuild a JSON tree depth-first.

    ``enter`` runs pre-order on every node and may replace it. Containers
    are then rebuilt from their visited children and passed to
    ``composite``; scalars are passed to ``leaf``. Both receive ``is_root``.
    """
    value = enter(value)
    if isinstance(value, dict):
        rebuilt_map = {
            key: visit(child, enter=enter, leaf=leaf, composite=composite, _root=False)
            for key, child in value.items()
        }
        return composite(rebuilt_map, _root)
    if isinstance(value, (list, tuple)):
        rebuilt_list = [
            visit(child, enter=enter, leaf=leaf, composite=composite, _root=False)
            for child in value
        ]
        return composite(rebuilt_list, _root)
    return leaf(value, _root)


def is_wrapped(value: Any) -> bool:
    """Return ``True`` if *value* is exactly ``{"type": "text", "text": ...}``."""
    return (
        isinstance(value, dict)
        and value.keys() == _WRAPPED_KEYS
        and value["type"] == WRAPPED_TYPE
    )


def wrap_value(value: Any) -> dict[str, Any]:
    """Wrap a single value in one envelope, without recursion."""
    return {"type": WRAPPED_TYPE, "text": value}


def _identity(value: Any) -> Any:
    return value


def _wrap_leaf(value: Any, _is_root: bool) -> Any:
    return wrap_value(value)


def _wrap_composite(value: Any, is_root: bool) -> Any:
    return value if is_root else wrap_value(value)


def _strip_envelopes(value: Any) -> Any:
    while is_wrapped(value):
        value = value["text"]
    return value


def _keep(value: Any, _is_root: bool) -> Any:
    return value


def wrap(value: Any) -> Any:
    """Convert a plain JSON value to the wrapped convention."""
    return visit(value, enter=_identity, leaf=_wrap_leaf, composite=_wrap_composite)


def unwrap(value: Any) -> Any:
    """Convert a wrapped JSON value back to plain. Unrecognized shapes pass through."""
    return visit(value, enter=_strip_envelopes, leaf=_keep, composite=_keep)


def convert(value: Any, source: WireFormat, target: WireFormat) -> Any:
    """Convert *value* from one convention to another."""
    if source == target:
        return value
    if target is WireFormat.WRAPPED:
        return wrap(value)
    return unwrap(value)


# ---------------------------------------------------------------------------
# Transformer
# ---------------------------------------------------------------------------


class FormatTransformer:
    """Applies a :class:`FormatConfig` to inbound params and outbound payloads.

    The dispatcher works on plain JSON internally: params are normalized
    from the input convention, results are rendered in the output one.
    """

    def __init__(self, config: FormatConfig | None = None) -> None:
        self._config = config or FormatConfig()

    @property
    def config(self) -> FormatConfig:
        return self._config

    def transform_params(self, params: Any) -> Any:
        """Normalize inbound params to plain JSON."""
        return convert(params, self._config.input_format, WireFormat.PLAIN)

    def transform_result(self, result: Any) -> Any:
        """Render a plain result in the output convention."""
        return convert(result, WireFormat.PLAIN, self._config.output_format)

    def transform_error_data(self, data: Any) -> Any:
        """Render error ``data`` in the output convention; ``None`` stays absent."""
        if data is None:
            return None
        return self.transform_result(data)

    def __repr__(self) -> str:
        return (
            f"FormatTransformer(input={self._config.input_format.value}, "
            f"output={self._config.output_format.value})"
        )
