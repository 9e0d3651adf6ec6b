"""Unit tests for snapshot_index module."""

from bookmark_backend import NativeNode
from conftest import chrome_document, folder_node, url_node
from snapshot_index import SnapshotIndex, build_index, folder_key, link_key, native_key


def bar_tree(children):
    return NativeNode.from_chrome(chrome_document(children)["roots"]["bookmark_bar"])


class TestKeys:
    """Test MatchKey derivation."""

    def test_link_key_uses_url_and_name(self):
        """Should distinguish links by url and name."""
        assert link_key("http://a", "A") != link_key("http://a", "B")
        assert link_key("http://a", "A") != link_key("http://b", "A")

    def test_folder_and_link_never_collide(self):
        """Should keep folder keys apart from link keys."""
        assert folder_key("A") != link_key("", "A")

    def test_native_key(self):
        """Should derive the key from node kind."""
        link = NativeNode(id="1", kind="url", name="A", url="http://a")
        folder = NativeNode(id="2", kind="folder", name="A", children=[])
        assert native_key(link) == link_key("http://a", "A")
        assert native_key(folder) == folder_key("A")


class TestBuildIndex:
    """Test build_index function."""

    def test_excludes_anchor(self):
        """Should index descendants only."""
        index = build_index(bar_tree([folder_node(10, "Work", [url_node(11, "Docs", "http://d")])]))
        assert index.node_count == 2
        assert len(index) == 2
        assert index.take(folder_key("Bookmarks bar")) is None

    def test_pre_order(self):
        """Should visit parents before their children."""
        index = build_index(bar_tree([
            folder_node(10, "A", [url_node(11, "A1", "http://a1")]),
            url_node(12, "B", "http://b"),
        ]))
        assert [node.id for node in index.orphans()] == ["10", "11", "12"]

    def test_parents_recorded(self):
        """Should remember each node's original parent."""
        index = build_index(bar_tree([folder_node(10, "Work", [url_node(11, "Docs", "http://d")])]))
        assert index.parent_of("10") == "1"
        assert index.parent_of("11") == "10"
        assert index.parent_of("nope") is None

    def test_empty_folder_indexed(self):
        """Should give an empty folder one slot."""
        index = build_index(bar_tree([folder_node(10, "Empty")]))
        assert index.take(folder_key("Empty")).id == "10"
        assert index.take(folder_key("Empty")) is None

    def test_no_side_effects(self):
        """Should leave the tree untouched."""
        tree = bar_tree([folder_node(10, "Work", [url_node(11, "Docs", "http://d")])])
        build_index(tree)
        assert [child.name for child in tree.children] == ["Work"]
        assert tree.children[0].children[0].name == "Docs"


class TestSnapshotIndex:
    """Test candidate consumption."""

    def test_duplicates_fifo(self):
        """Should hand out same-key candidates in encounter order."""
        index = build_index(bar_tree([
            folder_node(10, "X", [url_node(11, "Dup", "http://dup")]),
            url_node(12, "Dup", "http://dup"),
        ]))
        key = link_key("http://dup", "Dup")
        assert index.take(key).id == "11"
        assert index.take(key).id == "12"
        assert index.take(key) is None

    def test_consumed_excluded_from_orphans(self):
        """Should report only unconsumed candidates as orphans."""
        index = build_index(bar_tree([
            url_node(10, "A", "http://a"),
            url_node(11, "B", "http://b"),
        ]))
        index.take(link_key("http://a", "A"))
        assert [node.id for node in index.orphans()] == ["11"]
        assert index.consumed == {"10"}

    def test_unknown_key(self):
        """Should return None for keys with no candidates."""
        assert SnapshotIndex().take(folder_key("Nothing")) is None
