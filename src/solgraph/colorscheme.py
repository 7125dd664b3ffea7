"""
Color schemes for rendered call graphs.

A ColorScheme maps visibility, node type, call kind and contract status to
Graphviz attributes. Two schemes ship: a light default and a dark one.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class DigraphStyle(BaseModel):
    """Graph-wide attributes."""
    bgcolor: Optional[str] = None
    node_attribs: Dict[str, str] = Field(default_factory=dict)
    edge_attribs: Dict[str, str] = Field(default_factory=dict)


class VisibilityColors(BaseModel):
    """Function node colors by visibility."""
    is_filled: bool = False
    public: str = "green"
    external: str = "blue"
    private: str = "red"
    internal: str = "white"


class NodeTypeStyle(BaseModel):
    """Modifier and payable styling."""
    is_filled: bool = False
    shape: Optional[str] = "doubleoctagon"
    modifier: str = "yellow"
    payable: str = "brown"


class CallColors(BaseModel):
    """Edge colors by call kind."""
    default: str = "orange"
    regular: str = "green"
    this: str = "green"
    error: str = "red"
    super: str = "orange"
    modifier: str = "yellow"


class ClusterStyle(BaseModel):
    color: str = "lightgray"
    bgcolor: Optional[str] = None
    fontcolor: Optional[str] = None
    style: Optional[str] = None


class ContractStyles(BaseModel):
    """Cluster styling for declared and inferred contracts."""
    defined: ClusterStyle = Field(default_factory=lambda: ClusterStyle(bgcolor="lightgray"))
    undefined: ClusterStyle = Field(default_factory=ClusterStyle)


class ColorScheme(BaseModel):
    """
    Complete styling table used when building and rendering a call graph.

    ``event`` and ``error`` replace the default attributes of event and
    custom error nodes when set.
    """
    digraph: DigraphStyle = Field(default_factory=DigraphStyle)
    visibility: VisibilityColors = Field(default_factory=VisibilityColors)
    node_type: NodeTypeStyle = Field(default_factory=NodeTypeStyle)
    call: CallColors = Field(default_factory=CallColors)
    contract: ContractStyles = Field(default_factory=ContractStyles)
    event: Optional[Dict[str, str]] = None
    error: Optional[Dict[str, str]] = None

    def function_attributes(self, label: str, visibility: str, state_mutability: Optional[str]) -> Dict[str, str]:
        """
        Node attributes of a function.

        Args:
            label: Node label
            visibility: public, external, private, internal or default
            state_mutability: Declared mutability, if any

        Returns:
            Graphviz attributes for the node
        """
        attributes = {"label": label}
        if visibility in ("public", "default"):
            attributes["color"] = self.visibility.public
        elif visibility in ("external", "private", "internal"):
            attributes["color"] = getattr(self.visibility, visibility)

        if self.visibility.is_filled and "color" in attributes:
            attributes["fillcolor"] = attributes["color"]
            if state_mutability == "payable":
                attributes["color"] = self.node_type.payable
        return attributes

    def modifier_attributes(self, label: str) -> Dict[str, str]:
        attributes = {"label": label, "color": self.node_type.modifier}
        if self.node_type.is_filled:
            attributes["fillcolor"] = attributes["color"]
        if self.node_type.shape:
            attributes["shape"] = self.node_type.shape
        return attributes

    def event_attributes(self, label: str) -> Dict[str, str]:
        if self.event is not None:
            return {"label": label, **self.event}
        return {"label": label, "style": "dotted"}

    def error_attributes(self, label: str) -> Dict[str, str]:
        if self.error is not None:
            return {"label": label, **self.error}
        return {"label": label, "color": "brown2", "shape": "box"}

    def edge_color(self, kind: str) -> str:
        """Edge color of a call kind; external calls use the default color."""
        if kind == "external":
            return self.call.default
        return getattr(self.call, kind, self.call.default)

    def defined_cluster_attributes(self, label: str) -> Dict[str, str]:
        style = self.contract.defined
        attributes = {"label": label, "color": style.color, "style": style.style or "filled"}
        if style.fontcolor:
            attributes["fontcolor"] = style.fontcolor
        if style.bgcolor:
            attributes["bgcolor"] = style.bgcolor
        return attributes

    def undefined_cluster_attributes(self, label: str) -> Dict[str, str]:
        style = self.contract.undefined
        attributes = {"label": label, "color": style.color}
        if style.fontcolor:
            attributes["fontcolor"] = style.fontcolor
        if style.style:
            attributes["style"] = style.style
            if style.bgcolor:
                attributes["bgcolor"] = style.bgcolor
        return attributes


DEFAULT_COLOR_SCHEME = ColorScheme()

DARK_COLOR_SCHEME = ColorScheme(
    digraph=DigraphStyle(
        bgcolor="#2e3e56",
        node_attribs={
            "style": "filled",
            "fillcolor": "#edad56",
            "color": "#edad56",
            "penwidth": "3",
        },
        edge_attribs={
            "color": "#fcfcfc",
            "penwidth": "2",
            "fontname": "helvetica Neue Ultra Light",
        },
    ),
    visibility=VisibilityColors(
        is_filled=True,
        public="#FF9797",
        external="#ffbdb9",
        private="#edad56",
        internal="#f2c383",
    ),
    node_type=NodeTypeStyle(modifier="#1bc6a6"),
    call=CallColors(
        default="white",
        regular="#1bc6a6",
        this="#80e097",
        error="#e8726d",
        super="white",
        modifier="#1bc6a6",
    ),
    contract=ContractStyles(
        defined=ClusterStyle(color="#445773", bgcolor="#445773", fontcolor="#f0f0f0", style="rounded"),
        undefined=ClusterStyle(color="#e8726d", bgcolor="#3b4b63", fontcolor="#f0f0f0", style="rounded,dashed"),
    ),
)

COLOR_SCHEMES = {
    "default": DEFAULT_COLOR_SCHEME,
    "dark": DARK_COLOR_SCHEME,
}
