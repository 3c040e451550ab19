"""The resolver's output: a dependency tree plus its problem reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from chunkmc.constants import GRAPH_CONFLICT_FILL, GRAPH_NODE_COLORS
from chunkmc.models import (
    DependencyType,
    IncompatiblePair,
    LoaderConflict,
    ResolvedDependency,
    VersionConflict,
)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _quote(value: str) -> str:
    """Quote a DOT identifier or attribute value."""
    return f'"{_escape(value)}"'


def _node_color(node: ResolvedDependency) -> str:
    if node.type is DependencyType.EMBEDDED:
        return GRAPH_NODE_COLORS["embedded"]
    if node.is_optional:
        return GRAPH_NODE_COLORS["optional"]
    return GRAPH_NODE_COLORS["normal"]


@dataclass
class DependencyGraph:
    """Everything one :meth:`Resolver.resolve` call produced.

    ``conflicts``, ``incompatibles`` and ``loader_conflicts`` are problem
    reports. A graph that has them is still a complete resolution; the
    caller decides whether to proceed.

    Attributes:
        root: The resolved tree, rooted at the requested mod.
        all_mods: Unique ``id@version`` nodes of the tree in pre-order.
        conflicts: Mods resolved at more than one version.
        incompatibles: Installed pairs declared incompatible.
        loader_conflicts: Mods that do not support the target loader.
    """

    root: Optional[ResolvedDependency] = None
    all_mods: List[ResolvedDependency] = field(default_factory=list)
    conflicts: List[VersionConflict] = field(default_factory=list)
    incompatibles: List[IncompatiblePair] = field(default_factory=list)
    loader_conflicts: List[LoaderConflict] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.conflicts or self.incompatibles or self.loader_conflicts)

    def get_errors(self) -> List[str]:
        """One display line per problem: conflicts, then incompatibles, then loaders."""
        lines = [conflict.to_display_string() for conflict in self.conflicts]
        lines.extend(pair.to_display_string() for pair in self.incompatibles)
        lines.extend(loader.to_display_string() for loader in self.loader_conflicts)
        return lines

    def generate_graph(self) -> str:
        """Render the graph in Graphviz DOT format.

        Nodes are emitted in pre-order of the tree, one per mod id, so the
        output is identical for identical trees. Repeated parent/child
        edges (a shared dependency reached twice) are written once.
        """
        out: List[str] = [
            "digraph dependencies {",
            "  rankdir=TB;",
            "  node [shape=box];",
            "",
        ]

        seen_nodes: Set[str] = set()
        seen_edges: Set[Tuple[str, str]] = set()
        stack: List[Tuple[ResolvedDependency, Optional[str]]] = []
        if self.root is not None:
            stack.append((self.root, None))

        while stack:
            node, parent = stack.pop()
            if node.id not in seen_nodes:
                seen_nodes.add(node.id)
                # "\n" is a DOT line break inside the label, not an escaped char
                label = f'"{_escape(node.id)}\\n{_escape(node.version)}"'
                out.append(
                    f"  {_quote(node.id)} [label={label} "
                    f"color={_quote(_node_color(node))}];"
                )

            if parent is not None and (parent, node.id) not in seen_edges:
                seen_edges.add((parent, node.id))
                style = "dashed" if node.is_optional else "solid"
                out.append(f"  {_quote(parent)} -> {_quote(node.id)} [style={_quote(style)}];")

            stack.extend((child, node.id) for child in reversed(node.dependencies))

        for conflict in self.conflicts:
            out.append(
                f"  {_quote(conflict.mod_id + '_conflict')} "
                f"[label={_quote('CONFLICT: ' + conflict.mod_id)} color=\"red\" "
                f"style=\"filled\" fillcolor={_quote(GRAPH_CONFLICT_FILL)}];"
            )

        for pair in self.incompatibles:
            out.append(
                f"  {_quote(pair.mod_a)} -> {_quote(pair.mod_b)} "
                "[color=\"red\" style=\"dashed\" label=\"incompatible\"];"
            )

        out.append("}")
        return "\n".join(out) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "root": self.root.to_dict() if self.root is not None else None,
            "all_mods": [
                {"id": mod.id, "version": mod.version, "type": mod.type.value}
                for mod in self.all_mods
            ],
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "incompatibles": [pair.to_dict() for pair in self.incompatibles],
            "loader_conflicts": [loader.to_dict() for loader in self.loader_conflicts],
            "has_errors": self.has_errors(),
        }
