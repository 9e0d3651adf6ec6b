"""
Structural index over the native bookmark tree
"""

from typing import Dict, Iterator, List, Optional, Set, Tuple

from bookmark_backend import NativeNode

# ("url", url, name) for links, ("folder", name) for folders
MatchKey = Tuple[str, ...]


def link_key(url: str, name: str) -> MatchKey:
    return ('url', url, name)


def folder_key(name: str) -> MatchKey:
    return ('folder', name)


def native_key(node: NativeNode) -> MatchKey:
    """Structural identity of an existing node"""
    if node.is_link:
        return link_key(node.url or '', node.name)
    return folder_key(node.name)


class SnapshotIndex:
    """Candidates for reuse, grouped by MatchKey in encounter order.

    Candidates are never removed from their lists; consumption is tracked in a
    separate set owned by this index, so one index serves exactly one run.
    """

    def __init__(self):
        self.candidates: Dict[MatchKey, List[NativeNode]] = {}
        self.consumed: Set[str] = set()
        self.parents: Dict[str, str] = {}
        self.nodes: List[NativeNode] = []

    def add(self, node: NativeNode, parent_id: str):
        self.candidates.setdefault(native_key(node), []).append(node)
        self.parents[node.id] = parent_id
        self.nodes.append(node)

    def take(self, key: MatchKey) -> Optional[NativeNode]:
        """Consume the first unconsumed candidate for key, if any"""
        for node in self.candidates.get(key, []):
            if node.id not in self.consumed:
                self.consumed.add(node.id)
                return node
        return None

    def parent_of(self, node_id: str) -> Optional[str]:
        """Parent id at the time the index was built"""
        return self.parents.get(node_id)

    def orphans(self) -> Iterator[NativeNode]:
        """Every candidate never consumed, in encounter order"""
        for node in self.nodes:
            if node.id not in self.consumed:
                yield node

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


def build_index(anchor: NativeNode) -> SnapshotIndex:
    """Index every descendant of anchor (not anchor itself), pre-order"""
    index = SnapshotIndex()

    def visit(node: NativeNode, parent_id: str):
        index.add(node, parent_id)
        for child in node.children or []:
            visit(child, node.id)

    for child in anchor.children or []:
        visit(child, anchor.id)
    return index
