"""Shape compiler — converts JSON shape descriptions into strict validators.

A *shape description* is ordinary JSON written by the caller to say what the
extracted data should look like::

    {
        "name": "string",
        "age": {"type": "number"},
        "tags": ["string"],
        "address": {"city": "string", "zip": "string"}
    }

Every node is classified by :func:`infer_kind`.  An explicit ``"type"`` key
wins; otherwise the kind comes from the node's own JSON type, with the three
primitive tag names (``"string"``, ``"number"``, ``"boolean"``) read as tags.

No ``exec()`` is used; objects compile through :func:`pydantic.create_model`
and the root is wrapped in a :class:`pydantic.TypeAdapter`.

Public API
----------
- :func:`infer_kind` — classify a single shape node.
- :func:`synthesize` — compile a shape description into a :class:`ShapeValidator`.
- :func:`load_shape_file` — read a shape description from JSON or YAML.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, List, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    create_model,
)

__all__ = [
    "ShapeKind",
    "ShapeError",
    "UnsupportedShapeType",
    "ShapeValidator",
    "infer_kind",
    "synthesize",
    "load_shape_file",
]

# ---------------------------------------------------------------------------
# Kinds and errors
# ---------------------------------------------------------------------------


class ShapeKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ShapeError(ValueError):
    """Raised when a shape description cannot be compiled."""


class UnsupportedShapeType(ShapeError):
    """A node's inferred kind is not one of :class:`ShapeKind`."""

    def __init__(self, kind: Any, path: str = "$"):
        self.kind = kind
        self.path = path
        super().__init__(f"Unsupported data type: {kind!r} at {path}")


# Metadata key consumed by the compiler; never becomes a field
TYPE_KEY = "type"
ITEMS_KEY = "items"

_PRIMITIVE_TAGS = {ShapeKind.STRING.value, ShapeKind.NUMBER.value, ShapeKind.BOOLEAN.value}

# JSON has no NaN or Infinity
FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]

# Leaves are nullable so the model can answer "unknown" with null
_LEAF_TYPES: dict[str, Any] = {
    ShapeKind.STRING.value: Optional[StrictStr],
    ShapeKind.NUMBER.value: Optional[Union[StrictInt, FiniteFloat]],
    ShapeKind.BOOLEAN.value: Optional[StrictBool],
}

_OBJECT_CONFIG = ConfigDict(extra="ignore")

_NAME_RE = re.compile(r"[^0-9a-zA-Z]+")


# ---------------------------------------------------------------------------
# Kind inference
# ---------------------------------------------------------------------------


def infer_kind(node: Any) -> Any:
    """Return the kind tag for *node*.

    Resolution order:

    1. a mapping carrying a ``"type"`` key reports that value verbatim,
       even when other keys are present;
    2. a string equal to a primitive tag name is that tag;
    3. otherwise the node's own JSON type decides (``str`` → string,
       ``bool`` → boolean, ``int``/``float`` → number, ``list`` → array,
       mapping → object);
    4. anything else (``None``) reports ``"null"``.

    The returned value is not checked; :func:`synthesize` rejects unknown
    kinds.
    """
    if isinstance(node, Mapping):
        if TYPE_KEY in node:
            return node[TYPE_KEY]
        return ShapeKind.OBJECT.value
    if isinstance(node, str):
        if node in _PRIMITIVE_TAGS:
            return node
        return ShapeKind.STRING.value
    # bool before int: bool is an int subclass
    if isinstance(node, bool):
        return ShapeKind.BOOLEAN.value
    if isinstance(node, (int, float)):
        return ShapeKind.NUMBER.value
    if isinstance(node, (list, tuple)):
        return ShapeKind.ARRAY.value
    return "null"


# ---------------------------------------------------------------------------
# Type compilation helpers
# ---------------------------------------------------------------------------


def _model_name(parent_name: str, suffix: str) -> str:
    raw = f"{parent_name}_{suffix}"
    cleaned = _NAME_RE.sub("_", raw).strip("_") or "Shape"
    name = cleaned.title().replace("_", "")
    if name[0].isdigit():
        name = f"Shape{name}"
    return name


def _element_of(node: Any, path: str) -> Any:
    """Return the element description of an array node."""
    if isinstance(node, Mapping):
        if ITEMS_KEY not in node:
            raise UnsupportedShapeType(None, f"{path}[]")
        return node[ITEMS_KEY]
    if not node:
        raise UnsupportedShapeType(None, f"{path}[]")
    return node[0]


def _build_object_model(
    node: Mapping[str, Any],
    model_name: str,
    path: str,
) -> type[BaseModel]:
    """Build a pydantic model with one required field per declared key.

    Field names are synthetic and the declared key is the alias, so keys
    that are not Python identifiers (or clash with ``BaseModel``
    attributes) still round-trip unchanged.
    """
    field_definitions: dict[str, Any] = {}
    declared = [(str(key), child) for key, child in node.items() if key != TYPE_KEY]

    for index, (key, child) in enumerate(declared):
        annotation = _resolve_type(
            child,
            parent_name=_model_name(model_name, key),
            path=f"{path}.{key}",
        )
        field_definitions[f"field_{index}"] = (annotation, Field(..., alias=key))

    return create_model(  # type: ignore[call-overload]
        model_name,
        __config__=_OBJECT_CONFIG,
        **field_definitions,
    )


def _resolve_type(node: Any, *, parent_name: str, path: str) -> Any:
    """Map a shape node to a concrete Python / pydantic type."""
    kind = infer_kind(node)

    if isinstance(kind, str) and kind in _LEAF_TYPES:
        return _LEAF_TYPES[kind]

    if kind == ShapeKind.ARRAY.value:
        element = _element_of(node, path)
        item_type = _resolve_type(
            element,
            parent_name=_model_name(parent_name, "item"),
            path=f"{path}[]",
        )
        return Optional[List[item_type]]  # type: ignore[valid-type]

    if kind == ShapeKind.OBJECT.value and isinstance(node, Mapping):
        return _build_object_model(node, parent_name, path)

    raise UnsupportedShapeType(kind, path)


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class ShapeValidator:
    """Structural acceptor derived from one shape description.

    Built once per request and never shared.  :meth:`validate` returns plain
    JSON-compatible data keyed by the caller's original field names; fields
    the shape does not declare are dropped.
    """

    def __init__(self, shape: Any, annotation: Any):
        self.shape = shape
        self.kind: str = infer_kind(shape)
        self.annotation = annotation
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    def validate(self, value: Any) -> Any:
        """Validate *value*; raises :class:`pydantic.ValidationError` on mismatch."""
        parsed = self._adapter.validate_python(value)
        return self._adapter.dump_python(parsed, mode="json", by_alias=True)

    def validate_json(self, text: str | bytes) -> Any:
        """Parse and validate JSON *text* in one step."""
        parsed = self._adapter.validate_json(text)
        return self._adapter.dump_python(parsed, mode="json", by_alias=True)

    def json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema(by_alias=True)

    def __repr__(self) -> str:
        return f"ShapeValidator(kind={self.kind!r})"


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def synthesize(shape: Any, *, name: str = "Shape") -> ShapeValidator:
    """Compile a shape description into a :class:`ShapeValidator`.

    Parameters
    ----------
    shape:
        The caller's shape description (parsed JSON).
    name:
        Base name for the generated pydantic models.

    Raises
    ------
    UnsupportedShapeType
        If any node's kind is not string, number, boolean, array or object.
    """
    annotation = _resolve_type(shape, parent_name=_model_name(name, ""), path="$")
    return ShapeValidator(shape, annotation)


def load_shape_file(path: str | Path) -> Any:
    """Read a shape description from a ``.json``, ``.yaml`` or ``.yml`` file."""
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(content)
        return json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ShapeError(f"Could not parse shape file {path}: {exc}") from exc
