"""Tests for the node render policy."""

import math

import pytest

from whatsnext.render import (
    MIN_NODE_SIZE,
    GraphNode,
    NodeColors,
    RenderOptions,
    build_graph_data,
    draw_node,
    parse_option_flags,
    render_size,
)

AUTO = RenderOptions()


class TestRenderSize:
    """Tests for degree-based sizing."""

    def test_monotone_in_degree(self):
        """Larger degree never yields a smaller radius, and stays in [3, 10]."""
        sizes = [render_size(GraphNode(id="n", degree=d), AUTO) for d in range(0, 2000, 7)]

        assert sizes == sorted(sizes)
        assert all(3 <= s <= 10 for s in sizes)

    def test_log_formula(self):
        size = render_size(GraphNode(id="n", degree=4), AUTO)
        assert size == pytest.approx(3 + 2 * math.log(5))

    def test_missing_degree_defaults_to_one(self):
        size = render_size(GraphNode(id="n"), AUTO)
        assert size == pytest.approx(3 + 2 * math.log(2))

    def test_zero_degree_falls_back_to_val(self):
        node = GraphNode(id="n", degree=0, val=3)
        assert render_size(node, AUTO) == pytest.approx(3 + 2 * math.log(4))

    @pytest.mark.parametrize("degree", [-1, -5, -0.5])
    def test_negative_degree_stays_in_range(self, degree):
        """A negative degree is sized like an isolated node."""
        size = render_size(GraphNode(id="n", degree=degree), AUTO)
        assert size == MIN_NODE_SIZE

    def test_large_degree_clamped(self):
        assert render_size(GraphNode(id="n", degree=10_000), AUTO) == 10

    def test_fixed_size_ignores_degree(self):
        options = RenderOptions(size=6)
        assert render_size(GraphNode(id="n", degree=500), options) == 6


class TestRenderOptions:
    """Options are validated once, at construction."""

    def test_defaults(self):
        options = RenderOptions()
        assert options.type == "custom"
        assert options.size == "auto"
        assert options.label and options.hover and options.click and options.highlight

    @pytest.mark.parametrize("size", ["big", 0, -1, float("nan"), True])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError):
            RenderOptions(size=size)

    def test_invalid_type(self):
        with pytest.raises(ValueError):
            RenderOptions(type="robot")


class TestDrawNode:
    """Tests for drawing geometry."""

    def test_person_and_event_colors(self):
        colors = NodeColors()
        person = draw_node(GraphNode(id="p", type="person", color="#123"), 1.0)
        event = draw_node(GraphNode(id="e", type="event"), 1.0)

        assert person.fill == colors.person
        assert event.fill == colors.event

    def test_other_kind_keeps_own_color(self):
        drawing = draw_node(GraphNode(id="x", type="place", color="#123456"), 1.0)
        assert drawing.fill == "#123456"

    def test_other_kind_default_color(self):
        drawing = draw_node(GraphNode(id="x", type="place"), 1.0)
        assert drawing.fill == NodeColors().custom

    def test_label_geometry_scales_with_zoom(self):
        """Font size and padding are divided by the zoom scale."""
        node = GraphNode(id="p", name="Alice", type="person", x=10, y=20, degree=1)
        drawing = draw_node(node, 2.0, measure_text=lambda text, size: 30.0)

        label = drawing.label
        assert label.font_size == 6.0
        assert label.box_width == pytest.approx(30.0 + 6.0 * 0.4)
        assert label.box_height == pytest.approx(6.0 + 6.0 * 0.4)
        assert label.box_x == pytest.approx(10 - label.box_width / 2)
        assert label.box_y == pytest.approx(20 + drawing.radius + 3)
        assert label.text_y == pytest.approx(label.box_y + 3.0)
        assert label.font == "6.0px Sans-Serif"

    def test_no_label_when_disabled(self):
        node = GraphNode(id="p", name="Alice")
        assert draw_node(node, 1.0, RenderOptions(label=False)).label is None

    def test_no_label_without_name(self):
        assert draw_node(GraphNode(id="p"), 1.0).label is None

    def test_highlight_ring_for_hovered_node(self):
        node = GraphNode(id="p", type="person", hovered=True)
        drawing = draw_node(node, 4.0)

        assert drawing.ring is not None
        assert drawing.ring.radius == drawing.radius + 1
        assert drawing.ring.line_width == 0.5
        assert drawing.ring.glow_blur == 2.5

    def test_highlight_ring_for_selected_node(self):
        drawing = draw_node(GraphNode(id="p", selected=True), 1.0)
        assert drawing.ring is not None

    def test_no_ring_when_idle_or_disabled(self):
        assert draw_node(GraphNode(id="p"), 1.0).ring is None
        hovered = GraphNode(id="p", hovered=True)
        assert draw_node(hovered, 1.0, RenderOptions(highlight=False)).ring is None

    def test_rejects_non_positive_scale(self):
        with pytest.raises(ValueError):
            draw_node(GraphNode(id="p"), 0)


class TestParseOptionFlags:
    """Tests for the --key value flag language."""

    def test_empty_gives_defaults(self):
        assert parse_option_flags("") == RenderOptions()
        assert parse_option_flags(None) == RenderOptions()

    def test_full_flag_string(self):
        options = parse_option_flags("--type person --size 6 --label on --hover off")

        assert options.type == "person"
        assert options.size == 6.0
        assert options.label is True
        assert options.hover is False

    def test_boolean_only_on_is_true(self):
        options = parse_option_flags("--click yes --highlight ON")
        assert options.click is False
        assert options.highlight is False

    def test_invalid_type_ignored(self):
        assert parse_option_flags("--type robot").type == "custom"

    def test_malformed_size_skipped(self):
        """A bad size does not reject the rest of the string."""
        options = parse_option_flags("--size huge --type event")
        assert options.size == "auto"
        assert options.type == "event"

    def test_negative_size_skipped(self):
        assert parse_option_flags("--size -4").size == "auto"

    def test_size_with_unit_suffix(self):
        """A size is read up to its unit, as "6px" means 6."""
        assert parse_option_flags("--size 6px").size == 6.0
        assert parse_option_flags("--size 2.5e0em").size == 2.5
        assert parse_option_flags("--size px6").size == "auto"

    def test_overflowing_size_skipped(self):
        assert parse_option_flags("--size 1e999").size == "auto"

    def test_unknown_keys_ignored(self):
        options = parse_option_flags("--color red --label off")
        assert options.label is False

    def test_dangling_key_ignored(self):
        assert parse_option_flags("--label").label is True


class TestBuildGraphData:
    def test_degrees_from_connections_and_references(self, store, alice, bob, conf):
        carol = store.add_person({"name": "Carol", "event_id": conf.id})
        store.add_connection(alice.id, bob.id, {"event_id": conf.id})
        store.add_connection(alice.id, carol.id)

        data = build_graph_data(store.snapshot())
        degrees = {n.name: n.degree for n in data.nodes}

        assert degrees == {"Alice": 2, "Bob": 1, "Carol": 1, "Conf2024": 2}
        assert [n.type for n in data.nodes] == ["person"] * 3 + ["event"]
        assert {(link.source, link.target) for link in data.links} == {
            (alice.id, bob.id), (alice.id, carol.id),
        }
