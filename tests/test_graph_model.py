"""
Tests for the call graph model, color schemes and DOT rendering.
"""

from solgraph.colorscheme import DARK_COLOR_SCHEME, ColorScheme
from solgraph.graph import CallGraphModel, EdgeKind, insert_before_last, quote


def _model():
    model = CallGraphModel()
    a = model.ensure_cluster("A", defined=True)
    model.add_node(a, "A.f", {"label": "f", "color": "green"})
    model.add_node(a, "A.g", {"label": "g", "color": "white"})
    return model


class TestClusters:
    """Cluster creation and upgrades"""

    def test_ensure_is_idempotent(self):
        model = CallGraphModel()
        first = model.ensure_cluster("A", label="A  (lib)", defined=True)
        second = model.ensure_cluster("A", defined=False)

        assert first is second
        assert second.defined
        assert second.attributes["label"] == "A  (lib)"

    def test_undefined_cluster_is_upgraded(self):
        model = CallGraphModel()
        model.ensure_cluster("IERC20")
        assert "bgcolor" not in model.get_cluster("IERC20").attributes

        model.ensure_cluster("IERC20", defined=True)

        cluster = model.get_cluster("IERC20")
        assert cluster.defined
        assert cluster.attributes["bgcolor"] == "lightgray"

    def test_node_keeps_first_cluster(self):
        model = _model()
        other = model.ensure_cluster("B", defined=True)

        model.add_node(other, "A.f", {"label": "other"})

        assert model.cluster_of("A.f") == "A"
        assert model.get_node("A.f")["attributes"]["label"] == "f"
        assert other.nodes == []


class TestEdges:
    """Typed edge deduplication"""

    def test_same_kind_is_deduplicated(self):
        model = _model()
        model.add_edge("A.f", "A.g", EdgeKind.REGULAR)
        model.add_edge("A.f", "A.g", "regular")

        assert model.edges == [("A.f", "A.g", "regular")]

    def test_kinds_are_distinct_edges(self):
        model = _model()
        model.add_edge("A.f", "A.g", EdgeKind.REGULAR)
        model.add_edge("A.f", "A.g", EdgeKind.THIS)

        assert model.edge_set() == {("A.f", "A.g", "regular"), ("A.f", "A.g", "this")}


class TestRendering:
    """DOT output"""

    def test_dot_structure(self):
        model = _model()
        model.add_edge("A.f", "A.g", EdgeKind.REGULAR)

        dot = model.to_dot()

        assert dot.startswith("digraph G {")
        assert "ratio=auto" in dot
        assert "cluster_0_A" in dot
        assert '"A.f" -> "A.g"' in dot
        assert 'label = "Legend";' in dot
        assert dot.rstrip().endswith("}")

    def test_legend_comes_after_graph_body(self):
        model = _model()
        model.add_edge("A.f", "A.g", EdgeKind.REGULAR)

        dot = model.to_dot()

        assert dot.index('"A.f" -> "A.g"') < dot.index("Legend")

    def test_dark_scheme_background(self):
        model = CallGraphModel(DARK_COLOR_SCHEME)
        model.ensure_cluster("A", defined=True)

        dot = model.to_dot()

        assert "#2e3e56" in dot
        assert "#445773" in dot

    def test_cluster_names_are_sanitized(self):
        model = CallGraphModel()
        cluster = model.ensure_cluster("address(0)")
        model.add_node(cluster, "address(0).ping()", {"label": "ping()"})

        dot = model.to_dot()

        assert "cluster_0_address_0_" in dot
        assert '"address(0).ping()"' in dot

    def test_helpers(self):
        assert quote('say "hi"') == '"say \\"hi\\""'
        assert insert_before_last("a}b}", "}", "X") == "a}bX}"
        assert insert_before_last("ab", "}", "X") == "abX"


class TestColorScheme:
    """Attribute tables"""

    def test_function_colors_by_visibility(self):
        scheme = ColorScheme()

        assert scheme.function_attributes("f", "public", None)["color"] == "green"
        assert scheme.function_attributes("f", "default", None)["color"] == "green"
        assert scheme.function_attributes("f", "external", None)["color"] == "blue"
        assert scheme.function_attributes("f", "private", None)["color"] == "red"
        assert scheme.function_attributes("f", "internal", "view")["color"] == "white"

    def test_filled_scheme_marks_payable(self):
        attributes = DARK_COLOR_SCHEME.function_attributes("pay", "external", "payable")

        assert attributes["fillcolor"] == "#ffbdb9"
        assert attributes["color"] == DARK_COLOR_SCHEME.node_type.payable

    def test_edge_colors(self):
        scheme = ColorScheme()

        assert scheme.edge_color("external") == "orange"
        assert scheme.edge_color("regular") == "green"
        assert scheme.edge_color("error") == "red"
        assert scheme.edge_color("modifier") == "yellow"

    def test_custom_event_and_error_attributes(self):
        scheme = ColorScheme(event={"shape": "note"}, error={"color": "black"})

        assert scheme.event_attributes("Ping") == {"label": "Ping", "shape": "note"}
        assert scheme.error_attributes("Denied") == {"label": "Denied", "color": "black"}
