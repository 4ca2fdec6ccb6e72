"""Normalization engine: any supported input format -> canonical graph.

``normalize`` is the text entry point (JSON parsing plus dispatch);
``normalize_document`` dispatches an already parsed document. Output is
deterministic for identical input.
"""

import json
from typing import Any, Callable, Dict, Optional

from loguru import logger

from rulegraph.contracts import Result, err, ok
from rulegraph.kernel import errors as E
from rulegraph.kernel.formats import detect_format
from rulegraph.kernel.normalizers.format_a import normalize_format_a
from rulegraph.kernel.normalizers.format_b import normalize_format_b
from rulegraph.kernel.normalizers.format_c import normalize_format_c
from rulegraph.kernel.normalizers.format_d import normalize_format_d, synthesize_rule_id

NORMALIZERS: Dict[str, Callable[[Any], Result]] = {
    "A": normalize_format_a,
    "B": normalize_format_b,
    "C": normalize_format_c,
    "D": normalize_format_d,
}

AUTO = "auto"


def parse_document(text: str, format: Optional[str] = None) -> Result:
    """Parse JSON text; a decode failure is a single INVALID_JSON error."""
    fmt = format if format in NORMALIZERS else None
    try:
        return ok(json.loads(text))
    except json.JSONDecodeError as e:
        return err([E.invalid_json(e.msg, format=fmt, line=e.lineno, column=e.colno)])
    except RecursionError:
        return err([E.invalid_json("Document is nested too deeply to decode", format=fmt)])


def normalize_document(document: Any, format: Optional[str] = None) -> Result:
    """Normalize a parsed document in the declared format.

    ``format`` of None or ``"auto"`` detects the format from the document's
    outer shape.
    """
    if format is None or format == AUTO:
        detected = detect_format(document)
        if detected is None:
            return err([E.unknown_format("Could not detect the input format from the document shape")])
        logger.debug(f"Detected format {detected}")
        format = detected
    normalizer = NORMALIZERS.get(format)
    if normalizer is None:
        return err([E.unknown_format(f"Unknown format: {format}")])
    return normalizer(document)


def normalize(text: str, format: Optional[str] = None) -> Result:
    """Parse JSON text and normalize it into a canonical graph."""
    if format is not None and format != AUTO and format not in NORMALIZERS:
        return err([E.unknown_format(f"Unknown format: {format}")])
    parsed = parse_document(text, format)
    if not parsed.ok:
        return parsed
    return normalize_document(parsed.value, format)


__all__ = [
    "AUTO",
    "NORMALIZERS",
    "normalize",
    "normalize_document",
    "normalize_format_a",
    "normalize_format_b",
    "normalize_format_c",
    "normalize_format_d",
    "parse_document",
    "synthesize_rule_id",
]
