"""
Call graph model and DOT serialization.

Nodes and typed edges live in a networkx MultiDiGraph (edge key = call
kind); contract clusters are kept alongside in insertion order. Rendering
goes through pydot and appends a static legend.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

import networkx as nx
import pydot

from solgraph.colorscheme import ColorScheme, DEFAULT_COLOR_SCHEME


class EdgeKind(str, Enum):
    REGULAR = "regular"
    EXTERNAL = "external"
    ERROR = "error"
    MODIFIER = "modifier"
    THIS = "this"
    SUPER = "super"


@dataclass
class Cluster:
    """A contract grouping in the rendered graph."""
    name: str
    defined: bool
    attributes: Dict[str, str] = field(default_factory=dict)
    nodes: List[str] = field(default_factory=list)


LEGEND_TEMPLATE = """

rankdir=LR
node [shape=plaintext]
subgraph cluster_01 {{
label = "Legend";
key [label=<<table border="0" cellpadding="2" cellspacing="0" cellborder="0">
  <tr><td align="right" port="i1">Internal Call</td></tr>
  <tr><td align="right" port="i2">External Call</td></tr>
  <tr><td align="right" port="i3">Custom Error Call</td></tr>
  <tr><td align="right" port="i4">Defined Contract</td></tr>
  <tr><td align="right" port="i5">Undefined Contract</td></tr>
  </table>>]
key2 [label=<<table border="0" cellpadding="2" cellspacing="0" cellborder="0">
  <tr><td port="i1">&nbsp;&nbsp;&nbsp;</td></tr>
  <tr><td port="i2">&nbsp;&nbsp;&nbsp;</td></tr>
  <tr><td port="i3">&nbsp;&nbsp;&nbsp;</td></tr>
  <tr><td port="i4" bgcolor="{defined_bgcolor}">&nbsp;&nbsp;&nbsp;</td></tr>
  <tr><td port="i5">
    <table border="1" cellborder="0" cellspacing="0" cellpadding="7" color="{undefined_color}">
      <tr>
       <td></td>
      </tr>
     </table>
  </td></tr>
  </table>>]
key:i1:e -> key2:i1:w [color="{regular_color}"]
key:i2:e -> key2:i2:w [color="{external_color}"]
key:i3:e -> key2:i3:w [color="{error_color}"]
}}
"""


def quote(value: str) -> str:
    """Quote a DOT identifier or attribute value."""
    return '"' + value.replace('"', '\\"') + '"'


def legend(color_scheme: ColorScheme) -> str:
    """DOT statements of the legend subgraph for a color scheme."""
    return LEGEND_TEMPLATE.format(
        defined_bgcolor=color_scheme.contract.defined.bgcolor or color_scheme.contract.defined.color,
        undefined_color=color_scheme.contract.undefined.color,
        regular_color=color_scheme.call.regular,
        external_color=color_scheme.call.default,
        error_color=color_scheme.call.error,
    )


def insert_before_last(text: str, marker: str, insertion: str) -> str:
    index = text.rfind(marker)
    if index < 0:
        return text + insertion
    return text[:index] + insertion + text[index:]


class CallGraphModel:
    """
    Clustered call graph.

    Node identities are qualified names such as ``Token.transfer``. Every
    node belongs to exactly one cluster; an edge is identified by
    (caller, callee, kind), so repeated call sites add no duplicate edges.
    """

    def __init__(self, color_scheme: Optional[ColorScheme] = None):
        self.color_scheme = color_scheme or DEFAULT_COLOR_SCHEME
        self.graph = nx.MultiDiGraph()
        self.clusters: Dict[str, Cluster] = {}

    # -- clusters -----------------------------------------------------------

    def get_cluster(self, name: str) -> Optional[Cluster]:
        return self.clusters.get(name)

    def ensure_cluster(self, name: str, label: Optional[str] = None, defined: bool = False) -> Cluster:
        """
        Return the cluster for a contract, creating it on first use.

        Args:
            name: Contract name
            label: Cluster label (default: the contract name)
            defined: Whether the contract is declared in the analyzed sources

        Returns:
            The existing or new Cluster
        """
        label = label or name
        cluster = self.clusters.get(name)

        if cluster is None:
            cluster = Cluster(name=name, defined=defined)
            self.clusters[name] = cluster
        elif defined and not cluster.defined:
            cluster.defined = True
        else:
            return cluster

        if defined:
            cluster.attributes = self.color_scheme.defined_cluster_attributes(label)
        else:
            cluster.attributes = self.color_scheme.undefined_cluster_attributes(label)
        return cluster

    # -- nodes and edges ----------------------------------------------------

    def get_node(self, name: str) -> Optional[Dict[str, Any]]:
        if name not in self.graph:
            return None
        return self.graph.nodes[name]

    def add_node(self, cluster: Cluster, name: str, attributes: Dict[str, str]) -> str:
        """Add a node to a cluster; an existing node keeps its cluster and attributes."""
        if name not in self.graph:
            self.graph.add_node(name, cluster=cluster.name, attributes=dict(attributes))
            cluster.nodes.append(name)
        return name

    def add_edge(self, source: str, target: str, kind: EdgeKind) -> None:
        kind = EdgeKind(kind)
        if self.graph.has_edge(source, target, key=kind.value):
            return
        self.graph.add_edge(source, target, key=kind.value, kind=kind.value)

    @property
    def nodes(self) -> List[str]:
        return list(self.graph.nodes)

    @property
    def edges(self) -> List[Tuple[str, str, str]]:
        return [(source, target, kind) for source, target, kind in self.graph.edges(keys=True)]

    def edge_set(self) -> Set[Tuple[str, str, str]]:
        return set(self.edges)

    def cluster_of(self, node: str) -> Optional[str]:
        data = self.get_node(node)
        return data.get("cluster") if data is not None else None

    # -- rendering ----------------------------------------------------------

    def to_pydot(self) -> pydot.Dot:
        """Build the pydot graph, clusters in creation order."""
        scheme = self.color_scheme
        dot = pydot.Dot("G", graph_type="digraph", ratio="auto", page="100", compound="true")
        if scheme.digraph.bgcolor:
            dot.set("bgcolor", quote(scheme.digraph.bgcolor))
        if scheme.digraph.node_attribs:
            dot.set_node_defaults(**{k: quote(v) for k, v in scheme.digraph.node_attribs.items()})
        if scheme.digraph.edge_attribs:
            dot.set_edge_defaults(**{k: quote(v) for k, v in scheme.digraph.edge_attribs.items()})

        clustered: Set[str] = set()
        for index, cluster in enumerate(self.clusters.values()):
            subgraph = pydot.Cluster(
                f"{index}_{re.sub(r'[^A-Za-z0-9_]', '_', cluster.name)}",
                **{k: quote(v) for k, v in cluster.attributes.items()},
            )
            for name in cluster.nodes:
                subgraph.add_node(self._dot_node(name))
                clustered.add(name)
            dot.add_subgraph(subgraph)

        for name in self.graph.nodes:
            if name not in clustered:
                dot.add_node(self._dot_node(name))

        for source, target, kind in self.graph.edges(keys=True):
            dot.add_edge(pydot.Edge(quote(source), quote(target), color=quote(scheme.edge_color(kind))))

        return dot

    def to_dot(self) -> str:
        """Serialize to DOT text with the legend before the final closing brace."""
        return insert_before_last(self.to_pydot().to_string(), "}", legend(self.color_scheme))

    def _dot_node(self, name: str) -> pydot.Node:
        attributes = self.graph.nodes[name].get("attributes") or {"label": name}
        return pydot.Node(quote(name), **{k: quote(v) for k, v in attributes.items()})
