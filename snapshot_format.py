"""
Snapshot format: the editable YAML view of a bookmark tree
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

import yaml

from bookmark_backend import NativeNode

NODE_TYPES = ('url', 'folder')


class SnapshotError(ValueError):
    """The edited snapshot is malformed"""


@dataclass
class DesiredNode:
    """A node of the edited tree; identity is inferred structurally"""
    name: str
    kind: str
    url: Optional[str] = None
    children: List['DesiredNode'] = field(default_factory=list)

    @property
    def is_link(self) -> bool:
        return self.kind == 'url'


def simplify_node(node: NativeNode) -> Dict[str, Any]:
    """Convert a native node to its snapshot form (name, type, url|children)"""
    simplified = {'name': node.name}
    if node.is_link:
        simplified['type'] = 'url'
        simplified['url'] = node.url or ''
    else:
        simplified['type'] = 'folder'
        simplified['children'] = [simplify_node(child) for child in node.children or []]
    return simplified


def snapshot_from_native(anchor: NativeNode) -> Dict[str, Any]:
    """Snapshot tree for an anchor; the root is always a folder"""
    return {
        'name': anchor.name,
        'type': 'folder',
        'children': [simplify_node(child) for child in anchor.children or []],
    }


def dump_snapshot(snapshot: Dict[str, Any]) -> str:
    # no line wrapping so long URLs stay on one line
    return yaml.safe_dump(
        snapshot,
        indent=2,
        width=float('inf'),
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
    )


def load_snapshot(text: str) -> Any:
    """Parse snapshot YAML; syntax errors become SnapshotError"""
    if not text.strip():
        raise SnapshotError("Snapshot is empty")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SnapshotError(f"Failed to parse YAML: {e}") from e


def _parse_node(raw: Any, path: str) -> DesiredNode:
    if not isinstance(raw, dict):
        raise SnapshotError(f"{path}: expected a mapping, got {type(raw).__name__}")

    name = raw.get('name')
    name = '' if name is None else str(name)
    url = raw.get('url')
    node_type = raw.get('type')

    if node_type is not None and node_type not in NODE_TYPES:
        raise SnapshotError(f"{path}: unknown type '{node_type}' (expected 'url' or 'folder')")
    if node_type is None:
        node_type = 'url' if url is not None else 'folder'

    if node_type == 'url':
        if not isinstance(url, str):
            raise SnapshotError(f"{path}: link '{name}' needs a string 'url'")
        return DesiredNode(name=name, kind='url', url=url)

    children = raw.get('children')
    if children is None:
        children = []
    if not isinstance(children, list):
        raise SnapshotError(f"{path}: 'children' of folder '{name}' must be a list")
    return DesiredNode(
        name=name,
        kind='folder',
        children=[_parse_node(child, f"{path}.children[{i}]") for i, child in enumerate(children)],
    )


def parse_snapshot(raw: Any) -> List[DesiredNode]:
    """Validate a loaded snapshot and return the desired children of its root.

    The whole tree is checked up front so that a malformed snapshot is
    rejected before any bookmark is touched.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get('children'), list):
        raise SnapshotError('Snapshot format is invalid. Needs "children" list at root.')
    return [_parse_node(child, f"children[{i}]") for i, child in enumerate(raw['children'])]


def count_nodes(nodes: List[DesiredNode]) -> int:
    return sum(1 + count_nodes(node.children) for node in nodes)
