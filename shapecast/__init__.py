"""
SHAPECAST Package - Free text to JSON of a caller-defined shape

Main Components:
    - shapecast.schemas.shape_compiler: shape descriptions → strict validators
    - shapecast.extractor: retrying, validated extraction through an LLM
    - shapecast.api: FastAPI endpoint (``POST /api/json``)
    - shapecast.cli: ``shapecast`` command line
"""

__version__ = "0.1.0"

from .extractor import (
    ExtractionError,
    OutputParseError,
    RetryBudgetExhausted,
    extract,
)
from .generation import OpenAIChatGenerator, TextGenerator, TransportError
from .schemas.shape_compiler import (
    ShapeError,
    ShapeValidator,
    UnsupportedShapeType,
    synthesize,
)

__all__ = [
    "__version__",
    "ExtractionError",
    "OutputParseError",
    "RetryBudgetExhausted",
    "extract",
    "OpenAIChatGenerator",
    "TextGenerator",
    "TransportError",
    "ShapeError",
    "ShapeValidator",
    "UnsupportedShapeType",
    "synthesize",
]
