"""rulegraph CLI: normalize, validate, diff and draw rule graphs.

Exit codes: 0 success, 1 when the input is reported invalid, 2 on usage or
I/O problems.
"""

import argparse
import asyncio
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import List, Optional

from ._internal.canonical_json import canonical_dumps, pretty_dumps
from ._internal.logging import LOG_LEVELS, setup_logger

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

FORMAT_CHOICES = ["auto", "A", "B", "C", "D"]


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _emit(args, text: str, what: str) -> None:
    """Write ``text`` to ``--output`` when given, else to stdout."""
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text + "\n", encoding="utf-8")
        if not args.quiet:
            print(f"[OK] {what}")
            print(f"  Output: {args.output}")
    else:
        print(text)


def _print_errors(errors) -> None:
    print(canonical_dumps({"errors": [e.to_dict() for e in errors]}))


def _labels(args, parser: argparse.ArgumentParser) -> List[str]:
    if not args.label:
        return [path.stem for path in args.files]
    if len(args.label) != len(args.files):
        parser.error(f"got {len(args.label)} --label value(s) for {len(args.files)} file(s)")
    return list(args.label)


def _cmd_normalize(args) -> int:
    from .api import normalize

    result = normalize(_read(args.file), args.format)
    if not result.ok:
        _print_errors(result.errors)
        return EXIT_INVALID
    _emit(args, pretty_dumps(result.value.to_canonical_dict()), "Normalization complete")
    return EXIT_OK


def _cmd_validate(args) -> int:
    from .api import normalize_and_validate

    result = normalize_and_validate(_read(args.file), args.format)
    if not result.ok:
        _print_errors(result.errors)
        return EXIT_INVALID
    if not args.quiet:
        graph = result.value
        print("[OK] Graph valid")
        print(f"  Parameters: {len(graph.parameters)}")
        print(f"  Rules: {len(graph.rules)}")
    return EXIT_OK


def _cmd_diff(args, parser: argparse.ArgumentParser) -> int:
    from .api import LabeledSource, compare

    labels = _labels(args, parser)
    sources = [
        LabeledSource(label=label, text=_read(path), format=args.format)
        for label, path in zip(labels, args.files)
    ]
    report = compare(sources)
    _emit(args, pretty_dumps(report.model_dump(mode="json")), "Diff complete")
    if not args.quiet and report.diff is not None:
        for category in ("parameters", "rules", "edges"):
            counts = getattr(report.diff.metrics, category)
            print(
                f"  {category}: {counts.total} total, {counts.common} common, "
                f"{counts.partial} partial, {counts.unique} unique",
                file=sys.stderr,
            )
    return EXIT_OK if report.ok else EXIT_INVALID


def _cmd_dot(args, parser: argparse.ArgumentParser) -> int:
    from .api import LabeledSource, compare, normalize_and_validate
    from .adapters.graphviz import GraphvizRenderer, RenderError, visual_to_dot
    from .kernel.visual import canonical_to_visual, diff_to_visual

    if len(args.files) == 1:
        if args.label:
            parser.error("--label only applies when drawing a diff of several files")
        result = normalize_and_validate(_read(args.files[0]), args.format)
        if not result.ok:
            _print_errors(result.errors)
            return EXIT_INVALID
        visual = canonical_to_visual(result.value)
    else:
        labels = _labels(args, parser)
        report = compare([
            LabeledSource(label=label, text=_read(path), format=args.format)
            for label, path in zip(labels, args.files)
        ])
        if not report.ok:
            errors = [e for source in report.sources for e in source.errors] + report.diff_errors
            _print_errors(errors)
            return EXIT_INVALID
        visual = diff_to_visual(report.diff.graph)

    if not args.svg:
        _emit(args, visual_to_dot(visual), "DOT written")
        return EXIT_OK
    try:
        rendered = asyncio.run(GraphvizRenderer(args.dot).render(visual))
    except RenderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    _emit(args, rendered.svg, f"SVG rendered ({rendered.width}x{rendered.height})")
    return EXIT_OK


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point for rulegraph commands."""
    try:
        rulegraph_version = get_version("rulegraph")
    except PackageNotFoundError:
        rulegraph_version = "dev"

    parser = argparse.ArgumentParser(
        prog="rulegraph",
        description="rulegraph: normalize, validate and compare knowledge graphs of parameters and rules"
    )
    parser.add_argument("--version", action="version", version=f"rulegraph {rulegraph_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        help="Log level for stderr logging (default: WARNING)"
    )
    parent_parser.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default="auto",
        help="Input format (default: detect from document shape)"
    )
    parent_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result to this file instead of stdout"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Normalize a document into the canonical graph",
        parents=[parent_parser]
    )
    normalize_parser.add_argument("file", type=Path, help="Path to input JSON document")

    validate_parser = subparsers.add_parser(
        "validate",
        help="Normalize and validate a document",
        parents=[parent_parser]
    )
    validate_parser.add_argument("file", type=Path, help="Path to input JSON document")

    diff_parser = subparsers.add_parser(
        "diff",
        help="Compare two or more documents",
        parents=[parent_parser]
    )
    diff_parser.add_argument("files", type=Path, nargs="+", help="Paths to input JSON documents")
    diff_parser.add_argument(
        "--label",
        action="append",
        default=None,
        help="Source label, once per file in order (default: file stem)"
    )

    dot_parser = subparsers.add_parser(
        "dot",
        help="Draw a document (or the diff of several) as Graphviz DOT or SVG",
        parents=[parent_parser]
    )
    dot_parser.add_argument("files", type=Path, nargs="+", help="Paths to input JSON documents")
    dot_parser.add_argument(
        "--label",
        action="append",
        default=None,
        help="Source label, once per file in order (default: file stem)"
    )
    dot_parser.add_argument(
        "--svg",
        action="store_true",
        help="Render SVG with the Graphviz dot executable"
    )
    dot_parser.add_argument(
        "--dot",
        default="dot",
        help="Graphviz executable (default: dot)"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_USAGE)

    setup_logger(level="ERROR" if args.quiet else args.log_level)

    if args.command == "diff" and len(args.files) < 2:
        diff_parser.error("diff needs at least two files")

    try:
        if args.command == "normalize":
            code = _cmd_normalize(args)
        elif args.command == "validate":
            code = _cmd_validate(args)
        elif args.command == "diff":
            code = _cmd_diff(args, diff_parser)
        else:
            code = _cmd_dot(args, dot_parser)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = EXIT_USAGE
    except UnicodeDecodeError as e:
        print(f"Error: input is not UTF-8 text: {e}", file=sys.stderr)
        code = EXIT_USAGE
    sys.exit(code)


if __name__ == "__main__":
    main()
