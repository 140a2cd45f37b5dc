"""ImplementsGraph — lazy-built NetworkX graph of subclass edges.

Edges point from a class to each of its direct bases, so the classes
implementing an interface are exactly its ancestors in the graph.
Rebuilt per scan, no cross-run cache.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from prefixcop.domain.model import TypeDescriptor

type _Graph = nx.DiGraph


class ImplementsGraph:
    """Lazy-loading subclass graph over one scan's descriptors."""

    def __init__(self, types: Iterable[TypeDescriptor]) -> None:
        self._types = list(types)
        self._order = {descriptor.fqn: index for index, descriptor in enumerate(self._types)}
        self._graph: _Graph | None = None
        self._lock = threading.Lock()

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access.

        Validation workers share one instance, so the build is guarded.
        """
        with self._lock:
            if self._graph is None:
                self._graph = self._build()
            return self._graph

    def invalidate(self) -> None:
        """Drop the cached graph and the descriptors it was built from."""
        self._graph = None
        self._types = []
        self._order = {}

    def implementors(self, fqn: str) -> list[str]:
        """Scanned classes reaching *fqn* through subclass edges, in scan order.

        Unscanned bases (third-party or unresolved names) appear in the
        graph as plain nodes but are never returned.
        """
        g = self.graph
        if fqn not in g:
            return []
        found = nx.ancestors(g, fqn)
        return sorted((node for node in found if node in self._order), key=self._order.__getitem__)

    def _build(self) -> _Graph:
        """Build the DiGraph, adding every scanned class first.

        Loading nodes before edges keeps isolated classes visible and
        lets node attributes mark which names were scanned.
        """
        g: _Graph = nx.DiGraph()
        for descriptor in self._types:
            g.add_node(descriptor.fqn, interface=descriptor.is_interface, scanned=True)
        for descriptor in self._types:
            for base in descriptor.bases:
                if base != descriptor.fqn:
                    g.add_edge(descriptor.fqn, base)
        return g
