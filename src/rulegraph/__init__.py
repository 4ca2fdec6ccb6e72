"""rulegraph: normalize, validate and diff knowledge graphs of parameters and rules."""

from importlib.metadata import version, PackageNotFoundError

from loguru import logger

try:
    __version__ = version("rulegraph")
except PackageNotFoundError:
    __version__ = "dev"

# Library logging is opt-in; see rulegraph._internal.logging.setup_logger
logger.disable("rulegraph")

# Public API exports (diff and validate live in rulegraph.api)
from rulegraph.api import (
    ComparisonReport,
    LabeledSource,
    SourceReport,
    compare,
    normalize,
    normalize_all,
    render_diff,
    visualize,
)
from rulegraph.codes import ErrorType
from rulegraph.contracts import ErrorLocation, NormalizationError, Result
from rulegraph.kernel.canonical import CanonicalGraph, Parameter, Rule
from rulegraph.kernel.diff import DiffResult, LabeledGraph

__all__ = [
    "__version__",
    "CanonicalGraph",
    "ComparisonReport",
    "DiffResult",
    "ErrorLocation",
    "ErrorType",
    "LabeledGraph",
    "LabeledSource",
    "NormalizationError",
    "Parameter",
    "Result",
    "Rule",
    "SourceReport",
    "compare",
    "normalize",
    "normalize_all",
    "render_diff",
    "visualize",
]
