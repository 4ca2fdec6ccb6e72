"""Graphviz rendering backend.

Turns a ``VisualGraph`` into DOT text and, through the ``dot`` executable,
into SVG. This is the only module that knows Graphviz exists.
"""

import asyncio
import re
from typing import List, Tuple

from loguru import logger

from rulegraph.kernel.visual import RenderResult, VisualEdge, VisualGraph, VisualNode

DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 300

_FONT = "Helvetica, Arial, sans-serif"
_FONT_COLORS = {"unique": "red", "partial": "darkorange"}
_SVG_OPEN = re.compile(r"<svg\b[^>]*>", re.DOTALL)
_DIMENSION = r'(?<![\w-]){}="\s*(\d+(?:\.\d+)?)'


class RenderError(RuntimeError):
    """Raised when the Graphviz executable is missing or fails."""


def escape_label(text: str) -> str:
    """Escape for a double-quoted DOT string."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def escape_html(text: str) -> str:
    """Escape for an HTML-like DOT label."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def html_label(node: VisualNode) -> str:
    """One table row per label line; the first line is larger."""
    font_color = _FONT_COLORS.get(node.agreement_status or "", "black")
    rows = []
    for i, part in enumerate(node.label.split("\n")):
        size = 11 if i == 0 else 9
        rows.append(
            f'<TR><TD><FONT COLOR="{font_color}" POINT-SIZE="{size}">{escape_html(part)}</FONT></TD></TR>'
        )
    return f'<<TABLE BORDER="0" CELLBORDER="0" CELLSPACING="0" CELLPADDING="4">{"".join(rows)}</TABLE>>'


def _tooltip(present_in) -> List[str]:
    if not present_in:
        return []
    return [f'tooltip="{escape_label("Present in: " + ", ".join(present_in))}"']


def node_to_dot(node: VisualNode) -> str:
    attributes = [f"shape={node.shape}", f"label={html_label(node)}"]
    if node.style:
        attributes.append(f'style="{",".join(node.style)}"')
    if node.color:
        attributes.append(f'color="{escape_label(node.color)}"')
    if node.fill_color:
        attributes.append(f'fillcolor="{escape_label(node.fill_color)}"')
    attributes.extend(_tooltip(node.present_in))
    attributes.append('margin="0.15"')
    return f'  "{escape_label(node.id)}" [{", ".join(attributes)}];'


def edge_to_dot(edge: VisualEdge) -> str:
    attributes = [f"style={edge.style}"]
    if edge.color:
        attributes.append(f'color="{escape_label(edge.color)}"')
    if edge.arrowhead:
        attributes.append(f"arrowhead={edge.arrowhead}")
    if edge.style == "bold":
        attributes.append("penwidth=2")
    attributes.extend(_tooltip(edge.present_in))
    return f'  "{escape_label(edge.src)}" -> "{escape_label(edge.dst)}" [{", ".join(attributes)}];'


def visual_to_dot(graph: VisualGraph) -> str:
    """Complete DOT document; parameter nodes, then rule nodes, then edges."""
    lines = [
        "digraph KnowledgeGraph {",
        f"  rankdir={graph.direction};",
        "  graph [nodesep=0.6, ranksep=1.0];",
        f'  node [fontname="{_FONT}", fontsize=11];',
        f'  edge [fontname="{_FONT}", fontsize=9];',
        "",
    ]

    parameter_nodes = [n for n in graph.nodes if n.shape == "ellipse"]
    rule_nodes = [n for n in graph.nodes if n.shape == "box"]

    if parameter_nodes:
        lines.append("  // Parameter nodes")
        lines.extend(node_to_dot(n) for n in parameter_nodes)
        lines.append("")
    if rule_nodes:
        lines.append("  // Rule nodes")
        lines.extend(node_to_dot(n) for n in rule_nodes)
        lines.append("")
    if graph.edges:
        lines.append("  // Edges")
        lines.extend(edge_to_dot(e) for e in graph.edges)

    lines.append("}")
    return "\n".join(lines)


def svg_dimensions(svg: str) -> Tuple[int, int]:
    """Width and height from the root ``<svg>`` tag, units dropped."""
    match = _SVG_OPEN.search(svg)
    if match is None:
        return DEFAULT_WIDTH, DEFAULT_HEIGHT
    tag = match.group(0)
    dims = []
    for name, default in (("width", DEFAULT_WIDTH), ("height", DEFAULT_HEIGHT)):
        found = re.search(_DIMENSION.format(name), tag)
        dims.append(int(float(found.group(1))) if found else default)
    return dims[0], dims[1]


class GraphvizRenderer:
    """``GraphRenderer`` backed by ``dot -Tsvg`` in a subprocess."""

    def __init__(self, executable: str = "dot"):
        self.executable = executable

    async def render(self, graph: VisualGraph) -> RenderResult:
        dot = visual_to_dot(graph)
        logger.debug(f"Rendering {len(graph.nodes)} nodes, {len(graph.edges)} edges with {self.executable}")
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "-Tsvg",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise RenderError(f"Graphviz executable not found: {self.executable}") from e
        except OSError as e:
            raise RenderError(f"Could not start {self.executable}: {e}") from e

        try:
            stdout, stderr = await process.communicate(dot.encode("utf-8"))
        except BaseException:
            # cancelled or broken pipe; do not leave dot running
            if process.returncode is None:
                process.kill()
            raise
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise RenderError(f"{self.executable} exited with status {process.returncode}: {detail}")

        svg = stdout.decode("utf-8")
        width, height = svg_dimensions(svg)
        return RenderResult(svg=svg, width=width, height=height)
