"""
Tree Reconciler: apply an edited snapshot to the native bookmark tree
"""

import os
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from tqdm import tqdm

from bookmark_backend import BookmarkBackend, BookmarkBackendError
from snapshot_format import DesiredNode, count_nodes
from snapshot_index import SnapshotIndex, build_index, folder_key, link_key


def setup_sync_logger(logs_dir: str = "./logs") -> logging.Logger:
    """Set up dedicated logger for reconciliation runs"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    os.makedirs(logs_dir, exist_ok=True)
    log_filename = os.path.join(logs_dir, f"sync_{timestamp}.log")

    logger = logging.getLogger('snapshot_reconciler')
    logger.setLevel(logging.DEBUG)

    # Close and clear any existing handlers
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Don't propagate to root logger to avoid console spam
    logger.propagate = False

    logger.info("=== Bookmark Sync Log Started ===")
    logger.info(f"Log file: {log_filename}")

    print(f"📝 Detailed sync logging enabled: {log_filename}")

    return logger


@dataclass
class ReconcileResult:
    """Mutations applied during one run"""
    reused: int = 0
    moved: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    indexed: int = 0


class SnapshotReconciler:
    """Bring the subtree under an anchor in line with a desired tree.

    Existing nodes are paired with desired ones by MatchKey (name, plus url for
    links) anywhere in the subtree, so ids, guids and timestamps survive moves
    between folders. Mutations are issued one at a time, in desired order,
    since every positional index is relative to the current sibling list.
    """

    def __init__(self, backend: BookmarkBackend, logger: Optional[logging.Logger] = None,
                 show_progress: bool = False):
        self.backend = backend
        self.logger = logger or logging.getLogger('snapshot_reconciler')
        self.show_progress = show_progress
        self.index: Optional[SnapshotIndex] = None
        self.result = ReconcileResult()
        self._progress = None

    def run(self, desired_children: List[DesiredNode], anchor_id: str) -> ReconcileResult:
        """Full pass: index the anchor subtree, reconcile, then remove orphans.

        Reading the anchor is the only step whose failure aborts the run; it
        happens before any mutation.
        """
        anchor = self.backend.get_subtree(anchor_id)
        self.index = build_index(anchor)
        self.result = ReconcileResult(indexed=self.index.node_count)
        self.logger.info(f"Indexed {self.index.node_count} existing nodes under '{anchor.name}' ({anchor_id})")
        total = count_nodes(desired_children)
        self.logger.info(f"Reconciling {total} desired nodes")

        with tqdm(total=total, desc="Syncing bookmarks", unit="node",
                  disable=not self.show_progress) as progress:
            self._progress = progress
            try:
                self.reconcile(desired_children, anchor_id)
            finally:
                self._progress = None

        self.remove_orphans()
        self.logger.info(f"Run finished: {self.result}")
        return self.result

    def reconcile(self, desired_children: List[DesiredNode], parent_id: str):
        """Make the children of parent_id match desired_children, recursively"""
        if self.index is None:
            raise RuntimeError("reconcile() needs an index; call run() or build one first")

        index_in_parent = 0
        for desired in desired_children:
            if self._progress is not None:
                self._progress.update(1)

            key = link_key(desired.url, desired.name) if desired.is_link else folder_key(desired.name)
            existing = self.index.take(key)

            if existing is not None:
                node_id = existing.id
                self.result.reused += 1
                try:
                    self.backend.move(node_id, parent_id, index_in_parent)
                    self.result.moved += 1
                except BookmarkBackendError as e:
                    self.logger.warning(f"Failed to move node '{desired.name}' ({node_id}): {e}")

                if existing.name != desired.name or (desired.is_link and existing.url != desired.url):
                    try:
                        self.backend.update(node_id, name=desired.name, url=desired.url if desired.is_link else None)
                        self.result.updated += 1
                        self.logger.info(f"Updated '{existing.name}' -> '{desired.name}' ({node_id})")
                    except BookmarkBackendError as e:
                        self.logger.warning(f"Failed to update node '{desired.name}' ({node_id}): {e}")
            else:
                try:
                    created = self.backend.create(parent_id, index_in_parent, desired.name,
                                                  desired.url if desired.is_link else None)
                except BookmarkBackendError as e:
                    # Nowhere to attach its children; the next sibling takes this slot
                    self.logger.warning(f"Failed to create node '{desired.name}': {e}")
                    if self._progress is not None:
                        self._progress.update(count_nodes(desired.children))
                    continue
                node_id = created.id
                self.result.created += 1
                self.logger.info(f"Created {desired.kind} '{desired.name}' ({node_id}) in {parent_id} at {index_in_parent}")

            if not desired.is_link and desired.children:
                self.reconcile(desired.children, node_id)

            index_in_parent += 1

    def remove_orphans(self):
        """Delete every indexed node that no desired node claimed"""
        orphans = list(self.index.orphans())
        # orphans never move, so an orphan whose parent is also an orphan goes
        # away with that parent
        orphan_ids = {node.id for node in orphans}

        for node in tqdm(orphans, desc="Removing orphans", unit="node", disable=not self.show_progress):
            if self.index.parent_of(node.id) in orphan_ids:
                self.logger.debug(f"Skipping '{node.name}' ({node.id}): removed with its parent")
                continue
            self.logger.info(f"Removing orphan: '{node.name}' ({node.id})")
            try:
                self.backend.delete_subtree(node.id)
                self.result.deleted += 1
            except BookmarkBackendError as e:
                self.logger.warning(f"Failed to remove orphan '{node.name}', might be already gone: {e}")


def reconcile_snapshot(backend: BookmarkBackend, desired_children: List[DesiredNode], anchor_id: str,
                       logger: Optional[logging.Logger] = None, show_progress: bool = False) -> ReconcileResult:
    """Convenience wrapper for a single reconciliation run"""
    reconciler = SnapshotReconciler(backend, logger=logger, show_progress=show_progress)
    return reconciler.run(desired_children, anchor_id)
