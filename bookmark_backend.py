"""
Bookmark Backend Implementations for Snapshot Sync
"""

import copy
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple

# Microseconds between 1601-01-01 (WebKit epoch) and 1970-01-01
WEBKIT_EPOCH_OFFSET = 11644473600 * 1000000

ROOT_KEYS = ['bookmark_bar', 'other', 'synced']

# Chrome node fields that NativeNode carries explicitly
_KNOWN_FIELDS = {'id', 'type', 'name', 'url', 'children', 'date_added', 'date_modified', 'date_last_used'}


class BookmarkBackendError(RuntimeError):
    """A single backend mutation or read failed"""


class BookmarkNotFoundError(BookmarkBackendError):
    """The referenced bookmark id does not exist"""


def get_webkit_time() -> str:
    """Chrome timestamps are microseconds since 1601-01-01, stored as strings"""
    return str(int(time.time() * 1000000) + WEBKIT_EPOCH_OFFSET)


@dataclass
class NativeNode:
    """A node of the authoritative bookmark tree"""
    id: str
    kind: str  # "url" or "folder"
    name: str
    url: Optional[str] = None
    children: Optional[List['NativeNode']] = None
    date_added: Optional[str] = None
    date_modified: Optional[str] = None
    date_last_used: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_link(self) -> bool:
        return self.kind == 'url'

    @classmethod
    def from_chrome(cls, node: Dict) -> 'NativeNode':
        """Build a detached NativeNode tree from a Chrome bookmark dict"""
        is_folder = node.get('type') == 'folder'
        return cls(
            id=str(node['id']),
            kind='folder' if is_folder else 'url',
            name=node.get('name', ''),
            url=None if is_folder else node.get('url'),
            children=[cls.from_chrome(child) for child in node.get('children', [])] if is_folder else None,
            date_added=node.get('date_added'),
            date_modified=node.get('date_modified'),
            date_last_used=node.get('date_last_used'),
            extra={k: copy.deepcopy(v) for k, v in node.items() if k not in _KNOWN_FIELDS},
        )


class BookmarkBackend(ABC):
    """Mutation primitives the reconciler needs from a bookmark store.

    Every method raises BookmarkBackendError when the call cannot be applied.
    Indices are positions among the parent's current children.
    """

    @abstractmethod
    def get_subtree(self, anchor_id: str) -> NativeNode:
        """Return the current tree rooted at anchor_id"""

    @abstractmethod
    def create(self, parent_id: str, index: int, name: str, url: Optional[str] = None) -> NativeNode:
        """Create a link (url given) or an empty folder and return it"""

    @abstractmethod
    def update(self, node_id: str, name: Optional[str] = None, url: Optional[str] = None) -> None:
        """Rename a node and/or retarget a link"""

    @abstractmethod
    def move(self, node_id: str, parent_id: str, index: int) -> None:
        """Place a node at index under parent_id"""

    @abstractmethod
    def delete_subtree(self, node_id: str) -> None:
        """Remove a node together with all of its descendants"""


class ChromeBookmarksBackend(BookmarkBackend):
    """Backend over a loaded Chrome/Edge `Bookmarks` JSON document.

    The document is mutated in place; saving it back to disk is left to the
    caller (see BookmarkManager.save_bookmarks).
    """

    def __init__(self, bookmarks: Dict):
        if 'roots' not in bookmarks:
            raise BookmarkBackendError("Bookmarks document has no 'roots' section")
        self.bookmarks = bookmarks
        self.max_id = 0
        for root in self._roots():
            self._scan_max_id(root)

    def _roots(self) -> List[Dict]:
        return [node for node in self.bookmarks['roots'].values() if isinstance(node, dict) and 'id' in node]

    def _scan_max_id(self, node: Dict):
        try:
            self.max_id = max(self.max_id, int(node['id']))
        except (KeyError, TypeError, ValueError):
            pass
        for child in node.get('children', []):
            self._scan_max_id(child)

    def root_id(self, root_key: str) -> str:
        """Resolve a root name such as 'bookmark_bar' to its node id"""
        root = self.bookmarks['roots'].get(root_key)
        if not isinstance(root, dict) or 'id' not in root:
            raise BookmarkNotFoundError(f"Bookmark root '{root_key}' not found")
        return str(root['id'])

    def _locate(self, node_id: str) -> Tuple[Dict, Optional[Dict]]:
        """Find a node and its parent (None for roots)"""
        stack: List[Tuple[Dict, Optional[Dict]]] = [(root, None) for root in self._roots()]
        while stack:
            node, parent = stack.pop()
            if str(node['id']) == str(node_id):
                return node, parent
            for child in node.get('children', []):
                stack.append((child, node))
        raise BookmarkNotFoundError(f"Bookmark {node_id} not found")

    def _folder(self, node_id: str) -> Dict:
        node, _ = self._locate(node_id)
        if node.get('type') != 'folder':
            raise BookmarkBackendError(f"Bookmark {node_id} is not a folder")
        node.setdefault('children', [])
        return node

    def get_subtree(self, anchor_id: str) -> NativeNode:
        node, _ = self._locate(anchor_id)
        return NativeNode.from_chrome(node)

    def create(self, parent_id: str, index: int, name: str, url: Optional[str] = None) -> NativeNode:
        parent = self._folder(parent_id)
        siblings = parent['children']
        if index < 0 or index > len(siblings):
            raise BookmarkBackendError(f"Index {index} out of range for folder {parent_id} ({len(siblings)} children)")

        self.max_id += 1
        now = get_webkit_time()
        node = {
            "date_added": now,
            "date_last_used": "0",
            "guid": str(uuid.uuid4()),
            "id": str(self.max_id),
            "name": name,
        }
        if url is not None:
            node["type"] = "url"
            node["url"] = url
        else:
            node["children"] = []
            node["date_modified"] = now
            node["type"] = "folder"

        siblings.insert(index, node)
        return NativeNode.from_chrome(node)

    def update(self, node_id: str, name: Optional[str] = None, url: Optional[str] = None) -> None:
        node, _ = self._locate(node_id)
        if url is not None and node.get('type') != 'url':
            raise BookmarkBackendError(f"Cannot set a url on folder {node_id}")
        if name is not None:
            node['name'] = name
        if url is not None:
            node['url'] = url

    def move(self, node_id: str, parent_id: str, index: int) -> None:
        node, old_parent = self._locate(node_id)
        if old_parent is None:
            raise BookmarkBackendError(f"Cannot move root folder {node_id}")
        new_parent = self._folder(parent_id)
        if self._contains(node, new_parent):
            raise BookmarkBackendError(f"Cannot move bookmark {node_id} into its own subtree")

        self._detach(old_parent, node)
        siblings = new_parent['children']
        siblings.insert(max(0, min(index, len(siblings))), node)

    def delete_subtree(self, node_id: str) -> None:
        node, parent = self._locate(node_id)
        if parent is None:
            raise BookmarkBackendError(f"Cannot delete root folder {node_id}")
        self._detach(parent, node)

    @staticmethod
    def _detach(parent: Dict, node: Dict):
        # identity, not equality: sibling dicts may compare equal
        children = parent['children']
        for i, child in enumerate(children):
            if child is node:
                del children[i]
                return

    @staticmethod
    def _contains(ancestor: Dict, node: Dict) -> bool:
        if ancestor is node:
            return True
        return any(ChromeBookmarksBackend._contains(child, node) for child in ancestor.get('children', []))
