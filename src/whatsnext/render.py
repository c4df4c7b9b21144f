"""Node render policy for force-directed graph views.

Pure functions that turn a graph node plus view options into drawing
geometry: radius, fill color, label box and highlight ring. Nothing here
touches a canvas or the graph store; the display layer feeds the returned
NodeDrawing to whatever canvas it uses.

Sizes, offsets and positions are in graph (world) units. Stroke widths and
font sizes are divided by the current zoom ``scale`` so they stay visually
constant while zooming.

Option flags use a small command-line style language::

    --type person --size 6 --label on --highlight off
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional, Union

from .interfaces import GraphSnapshot
from .utils import clamp, parse_leading_float

MIN_NODE_SIZE = 3.0
MAX_NODE_SIZE = 10.0
FIXED_NODE_SIZE = 5.0

LABEL_FONT_PX = 12.0
LABEL_PADDING_FACTOR = 0.4
LABEL_OFFSET = 3.0
HIGHLIGHT_LINE_PX = 2.0
HIGHLIGHT_GLOW_PX = 10.0

NODE_TYPES = ("person", "event", "custom")
BOOLEAN_FLAGS = ("label", "hover", "click", "highlight")

_FLAG_PATTERN = re.compile(r"--(\w+)\s+(\S+)")

SizeOption = Union[str, float]
TextMeasure = Callable[[str, float], float]


@dataclass(frozen=True)
class NodeColors:
    """Palette used when drawing nodes."""
    person: str = "#4CAF50"
    event: str = "#2196F3"
    custom: str = "#9E9E9E"
    stroke: str = "#fff"
    text: str = "#000"
    label_bg: str = "rgba(255, 255, 255, 0.8)"


@dataclass(frozen=True)
class RenderOptions:
    """View options for drawing nodes.

    Attributes:
        type: Default node kind of the view (person, event or custom).
        label: Draw the node name under the node.
        hover: Hover interaction enabled.
        click: Click interaction enabled.
        size: "auto" to size by degree, or a fixed positive radius.
        highlight: Draw a ring around hovered/selected nodes.
        colors: Palette.
    """
    type: str = "custom"
    label: bool = True
    hover: bool = True
    click: bool = True
    size: SizeOption = "auto"
    highlight: bool = True
    colors: NodeColors = field(default_factory=NodeColors)

    def __post_init__(self):
        if self.type not in NODE_TYPES:
            raise ValueError(
                f"Invalid node type: {self.type}. "
                f"Valid options: {', '.join(NODE_TYPES)}"
            )
        if isinstance(self.size, str):
            if self.size != "auto":
                raise ValueError(f"Invalid size: {self.size}. Use 'auto' or a number")
        elif isinstance(self.size, bool) or not isinstance(self.size, (int, float)):
            raise ValueError(f"Invalid size: {self.size!r}")
        elif not math.isfinite(self.size) or self.size <= 0:
            raise ValueError("size must be a positive number")


@dataclass
class GraphNode:
    """A node as handed to the renderer by the force-graph layer.

    ``degree`` and ``val`` are alternative connectivity hints; ``hovered``
    and ``selected`` are interaction flags set by the display layer.
    """
    id: str
    name: str = ""
    type: str = "custom"
    x: float = 0.0
    y: float = 0.0
    degree: Optional[float] = None
    val: Optional[float] = None
    color: Optional[str] = None
    hovered: bool = False
    selected: bool = False


@dataclass(frozen=True)
class GraphLink:
    """An edge of the force-graph projection."""
    id: str
    source: str
    target: str
    relationship_type: str
    strength: int


@dataclass(frozen=True)
class GraphData:
    """Nodes and links ready for a force-directed layout."""
    nodes: tuple[GraphNode, ...] = ()
    links: tuple[GraphLink, ...] = ()


@dataclass(frozen=True)
class HighlightRing:
    """Ring drawn around a hovered or selected node."""
    radius: float
    color: str
    line_width: float
    glow_blur: float
    outline_color: str


@dataclass(frozen=True)
class NodeLabel:
    """Label text plus its background box (top-left corner, width, height)."""
    text: str
    font: str
    font_size: float
    text_x: float
    text_y: float
    box_x: float
    box_y: float
    box_width: float
    box_height: float
    color: str
    background: str


@dataclass(frozen=True)
class NodeDrawing:
    """Everything needed to paint one node."""
    x: float
    y: float
    radius: float
    fill: str
    ring: Optional[HighlightRing] = None
    label: Optional[NodeLabel] = None


def approximate_text_width(text: str, font_size: float) -> float:
    """Rough sans-serif text width, for when no real canvas is available."""
    return len(text) * font_size * 0.6


def render_size(node: GraphNode, options: RenderOptions) -> float:
    """Radius of ``node`` under ``options``.

    With ``size="auto"`` the radius grows logarithmically with the node's
    degree (falling back to ``val``, then 1) and is clamped to [3, 10], so a
    few hubs cannot dominate the canvas. A negative degree counts as zero.
    A fixed size is returned as is.
    """
    if options.size == "auto":
        degree = max(node.degree or node.val or 1, 0)
        size = MIN_NODE_SIZE + math.log(degree + 1) * 2
        return clamp(size, MIN_NODE_SIZE, MAX_NODE_SIZE)
    return float(options.size)


def node_color(node: GraphNode, colors: NodeColors) -> str:
    """Fill color by node kind; unknown kinds keep their own color."""
    if node.type == "person":
        return colors.person
    if node.type == "event":
        return colors.event
    return node.color or colors.custom


def draw_node(
    node: GraphNode,
    scale: float,
    options: Optional[RenderOptions] = None,
    measure_text: TextMeasure = approximate_text_width,
) -> NodeDrawing:
    """Compute the drawing for one node at zoom ``scale``.

    Args:
        node: Node with position, kind and interaction flags.
        scale: Current zoom factor (must be positive).
        options: View options; defaults when None.
        measure_text: Returns the rendered width of a string at a font size.

    Returns:
        NodeDrawing with the highlight ring present only when highlighting
        is enabled and the node is hovered or selected, and the label present
        only when labels are enabled and the node has a name.
    """
    if scale <= 0:
        raise ValueError("scale must be positive")
    opts = options or RenderOptions()
    fill = node_color(node, opts.colors)
    radius = render_size(node, opts)

    ring = None
    if opts.highlight and (node.hovered or node.selected):
        ring = HighlightRing(
            radius=radius + 1,
            color=fill,
            line_width=HIGHLIGHT_LINE_PX / scale,
            glow_blur=HIGHLIGHT_GLOW_PX / scale,
            outline_color=opts.colors.stroke,
        )

    label = None
    if opts.label and node.name:
        font_size = LABEL_FONT_PX / scale
        padding = font_size * LABEL_PADDING_FACTOR
        width = measure_text(node.name, font_size) + padding
        height = font_size + padding
        top = node.y + radius + LABEL_OFFSET
        label = NodeLabel(
            text=node.name,
            font=f"{font_size}px Sans-Serif",
            font_size=font_size,
            text_x=node.x,
            text_y=top + font_size / 2,
            box_x=node.x - width / 2,
            box_y=top,
            box_width=width,
            box_height=height,
            color=opts.colors.text,
            background=opts.colors.label_bg,
        )

    return NodeDrawing(x=node.x, y=node.y, radius=radius, fill=fill, ring=ring, label=label)


def parse_option_flags(args: Optional[str] = "") -> RenderOptions:
    """Parse ``--key value`` flags into RenderOptions.

    Recognized keys: ``type`` (person|event|custom), ``label``, ``hover``,
    ``click``, ``highlight`` ("on" is true, anything else false) and
    ``size`` ("auto" or a positive number; a unit suffix such as "6px" is
    read up to the number). Unknown keys and malformed values are skipped;
    parsing never fails.
    """
    values: dict = {}
    for match in _FLAG_PATTERN.finditer(args or ""):
        key, value = match.group(1), match.group(2)
        if key == "type":
            if value in NODE_TYPES:
                values["type"] = value
        elif key in BOOLEAN_FLAGS:
            values[key] = value == "on"
        elif key == "size":
            if value == "auto":
                values["size"] = "auto"
                continue
            size = parse_leading_float(value)
            if size is not None and math.isfinite(size) and size > 0:
                values["size"] = size
    return RenderOptions(**values)


def build_graph_data(snapshot: GraphSnapshot) -> GraphData:
    """Project a snapshot onto force-graph nodes and links.

    A person's degree is the number of connections touching them. An
    event's degree is the number of people and connections that reference
    it.
    """
    degree: dict[str, int] = {}
    for conn in snapshot.connections:
        degree[conn.from_id] = degree.get(conn.from_id, 0) + 1
        degree[conn.to_id] = degree.get(conn.to_id, 0) + 1
    for item in (*snapshot.people, *snapshot.connections):
        if item.event_id is not None:
            degree[item.event_id] = degree.get(item.event_id, 0) + 1

    nodes = [
        GraphNode(id=p.id, name=p.name, type="person", degree=degree.get(p.id, 0))
        for p in snapshot.people
    ]
    nodes.extend(
        GraphNode(id=e.id, name=e.name, type="event", degree=degree.get(e.id, 0))
        for e in snapshot.events
    )
    links = tuple(
        GraphLink(
            id=c.id,
            source=c.from_id,
            target=c.to_id,
            relationship_type=c.relationship_type,
            strength=c.strength,
        )
        for c in snapshot.connections
    )
    return GraphData(nodes=tuple(nodes), links=links)
