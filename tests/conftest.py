"""Shared fixtures: small Chrome bookmark documents."""

import json

import pytest


def url_node(node_id, name, url, **extra):
    node = {
        "date_added": "13300000000000000",
        "date_last_used": "0",
        "guid": f"guid-{node_id}",
        "id": str(node_id),
        "name": name,
        "type": "url",
        "url": url,
    }
    node.update(extra)
    return node


def folder_node(node_id, name, children=None, **extra):
    node = {
        "children": children or [],
        "date_added": "13300000000000000",
        "date_last_used": "0",
        "date_modified": "13300000000000001",
        "guid": f"guid-{node_id}",
        "id": str(node_id),
        "name": name,
        "type": "folder",
    }
    node.update(extra)
    return node


def chrome_document(bar_children=None, other_children=None):
    return {
        "checksum": "0123456789abcdef",
        "roots": {
            "bookmark_bar": folder_node(1, "Bookmarks bar", bar_children),
            "other": folder_node(2, "Other bookmarks", other_children),
            "synced": folder_node(3, "Mobile bookmarks"),
        },
        "version": 1,
    }


@pytest.fixture
def work_document():
    """Bookmarks bar holding Work/[Docs]"""
    return chrome_document([
        folder_node(10, "Work", [url_node(11, "Docs", "http://d")]),
    ])


@pytest.fixture
def bookmarks_file(tmp_path, work_document):
    path = tmp_path / "Bookmarks"
    path.write_text(json.dumps(work_document), encoding="utf-8")
    return path
