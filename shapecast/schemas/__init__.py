"""Shape description compilation."""

from .shape_compiler import (
    ShapeError,
    ShapeKind,
    ShapeValidator,
    UnsupportedShapeType,
    infer_kind,
    load_shape_file,
    synthesize,
)

__all__ = [
    "ShapeError",
    "ShapeKind",
    "ShapeValidator",
    "UnsupportedShapeType",
    "infer_kind",
    "load_shape_file",
    "synthesize",
]
