"""
GraphStore - dense, id-indexed storage for simulated networks.

Nodes and links live in flat lists and refer to each other only by integer id,
so a search never holds object references into the topology. Coordinates in
the unit square are kept alongside for the geometric generators and the
bearing-driven search.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from search_simulator.models import LinkType, LinkRecord, NetworkSnapshot

logger = logging.getLogger(__name__)

# Returned by link_count() when the undirected endpoint count is odd
LINK_PARITY_ERROR = -1


@dataclass
class Node:
    """A network node. Knows only the ids of its incident links."""
    node_id: int
    link_ids: List[int] = field(default_factory=list)

    @property
    def degree(self) -> int:
        return len(self.link_ids)


@dataclass(frozen=True)
class Link:
    link_id: int
    source_id: int
    destination_id: int
    link_type: LinkType = LinkType.UNDIRECTED

    def other_end(self, node_id: int) -> int:
        """Endpoint opposite to node_id."""
        return self.destination_id if node_id == self.source_id else self.source_id


class GraphStore:
    """Owns every node, link and coordinate of one network."""

    def __init__(self, node_count: int = 0):
        self.expected_node_count = node_count
        self.nodes: List[Node] = []
        self.links: List[Link] = []
        self.locations: List[Tuple[float, float]] = []
        # (low, high) for undirected links, (source, destination) for directed ones
        self._undirected_pairs: Set[Tuple[int, int]] = set()
        self._directed_pairs: Set[Tuple[int, int]] = set()

    # --- Construction ---

    def add_node(
        self,
        location: Optional[Tuple[float, float]] = None,
        rng: Optional[random.Random] = None,
    ) -> Node:
        """Append the next dense id, at the given location or a uniform one drawn from rng."""
        if location is None:
            if rng is None:
                raise ValueError("add_node needs either a location or a random source")
            location = (rng.random(), rng.random())
        node = Node(node_id=len(self.nodes))
        self.nodes.append(node)
        self.locations.append((float(location[0]), float(location[1])))
        return node

    def add_link(self, a: int, b: int, link_type: LinkType = LinkType.UNDIRECTED) -> Link:
        if not self._valid_id(a) or not self._valid_id(b):
            raise ValueError(f"Link endpoints must be existing node ids, got ({a}, {b})")
        if a == b:
            raise ValueError(f"Self link rejected on node {a}")
        if self.is_connected(a, b, link_type):
            raise ValueError(f"Duplicate link rejected between {a} and {b}")

        link = Link(link_id=len(self.links), source_id=a, destination_id=b, link_type=link_type)
        self.links.append(link)
        self.nodes[a].link_ids.append(link.link_id)
        if link_type == LinkType.UNDIRECTED:
            self.nodes[b].link_ids.append(link.link_id)
            self._undirected_pairs.add((min(a, b), max(a, b)))
        else:
            self._directed_pairs.add((a, b))
        return link

    # --- Lookup ---

    def node_count(self) -> int:
        return len(self.nodes)

    def node_by_id(self, node_id: int) -> Optional[Node]:
        if not self._valid_id(node_id):
            return None
        return self.nodes[node_id]

    def location(self, node_id: int) -> Tuple[float, float]:
        return self.locations[node_id]

    def neighbors_of(self, node_id: int) -> List[int]:
        """Ids reachable over one incident link, in link insertion order."""
        node = self.nodes[node_id]
        return [self.links[link_id].other_end(node_id) for link_id in node.link_ids]

    def degree(self, node_id: int) -> int:
        return self.nodes[node_id].degree

    def is_connected(self, a: int, b: int, link_type: LinkType = LinkType.UNDIRECTED) -> bool:
        if link_type == LinkType.DIRECTED:
            return (a, b) in self._directed_pairs
        return (min(a, b), max(a, b)) in self._undirected_pairs

    def pick_random_neighbor(self, node_id: int, rng: random.Random) -> int:
        """
        Uniform choice over the node's incident links.

        An isolated node returns its own id, which callers treat as the
        signal that no hop is possible.
        """
        link_ids = self.nodes[node_id].link_ids
        if not link_ids:
            return node_id
        link = self.links[link_ids[rng.randrange(len(link_ids))]]
        return link.other_end(node_id)

    # --- Geometry ---

    def distance(self, a: int, b: int) -> float:
        (xa, ya), (xb, yb) = self.locations[a], self.locations[b]
        return math.hypot(xb - xa, yb - ya)

    def bearing(self, a: int, b: int) -> float:
        """
        Direction from a to b in degrees, in [0, 360).

        Measured compass style: atan2 takes the x offset first, so 0 points
        along +y and 90 along +x.
        """
        (xa, ya), (xb, yb) = self.locations[a], self.locations[b]
        angle = math.degrees(math.atan2(xb - xa, yb - ya))
        if angle < 0:
            angle += 360.0
        return angle

    # --- Integrity ---

    def link_count(self) -> int:
        """
        Number of links, each undirected link counted once.

        Undirected links are counted from both endpoints and halved; an odd
        endpoint count means the store is corrupt and LINK_PARITY_ERROR is
        returned.
        """
        undirected_endpoints = 0
        directed = 0
        for node in self.nodes:
            for link_id in node.link_ids:
                if self.links[link_id].link_type == LinkType.UNDIRECTED:
                    undirected_endpoints += 1
                else:
                    directed += 1

        if undirected_endpoints % 2 != 0:
            logger.error(f"Undirected link endpoint count is odd ({undirected_endpoints}); network is inconsistent")
            return LINK_PARITY_ERROR
        return undirected_endpoints // 2 + directed

    def _valid_id(self, node_id: int) -> bool:
        return 0 <= node_id < len(self.nodes)

    # --- Persistence ---

    def to_snapshot(self) -> NetworkSnapshot:
        return NetworkSnapshot(
            node_count=len(self.nodes),
            locations=list(self.locations),
            links=[
                LinkRecord(source_id=link.source_id, destination_id=link.destination_id, link_type=link.link_type)
                for link in self.links
            ],
        )

    @classmethod
    def from_snapshot(cls, snapshot: NetworkSnapshot) -> "GraphStore":
        if len(snapshot.locations) != snapshot.node_count:
            raise ValueError(
                f"Snapshot lists {len(snapshot.locations)} locations for {snapshot.node_count} nodes"
            )
        store = cls(snapshot.node_count)
        for location in snapshot.locations:
            store.add_node(location=location)
        for record in snapshot.links:
            store.add_link(record.source_id, record.destination_id, record.link_type)
        return store
