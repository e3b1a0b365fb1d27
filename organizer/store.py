"""Directory store abstraction and its implementations.

The planner only talks to a :class:`DirectoryStore`.  Backends normalise
their listing format into :class:`~organizer.models.DirEntry` before the
data reaches the core.
"""
from __future__ import annotations

import itertools
import logging
import os
import shutil
import stat
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .models import DirEntry

log = logging.getLogger(__name__)


class OperationError(Exception):
    """Raised when the storage backend rejects an operation."""
    pass


class DirectoryStore(ABC):
    """Abstract remote (or local) file tree addressed by opaque ids."""

    @abstractmethod
    def list_dir(self, folder_id: str) -> list[DirEntry]:
        """Return every direct child of *folder_id*, following pagination."""

    @abstractmethod
    def rename(self, item_id: str, new_name: str) -> None:
        """Rename an item in place.  The id stays the same."""

    @abstractmethod
    def mkdir(self, parent_id: str, name: str) -> str:
        """Create a folder, or return the id of an existing one with that name."""

    @abstractmethod
    def move(self, item_ids: list[str], to_parent_id: str) -> str | None:
        """Move items; returns a task id when completion is asynchronous."""

    @abstractmethod
    def remove(self, item_ids: list[str]) -> str | None:
        """Soft-delete items; returns a task id when completion is asynchronous."""

    def wait(self, task_id: str | None) -> None:
        """Block until an asynchronous task reaches a terminal state."""
        return None


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

@dataclass
class _Node:
    name: str
    is_dir: bool
    parent_id: str
    size: int = 0
    updated_at: str = ""


class MemoryStore(DirectoryStore):
    """Directory tree held in process memory.

    Every mutating call is appended to ``calls`` as ``(operation, args)``
    so that a dry run can be checked for zero side effects.

    Usage::

        store = MemoryStore()
        show = store.add_dir(store.root_id, "Breaking Bad")
        store.add_file(show, "ep01.mkv")
    """

    def __init__(self, root_name: str = ""):
        self._ids = itertools.count(1)
        self.root_id = "root"
        self._nodes: dict[str, _Node] = {
            self.root_id: _Node(name=root_name, is_dir=True, parent_id=""),
        }
        self.trashed: dict[str, _Node] = {}
        self.calls: list[tuple[str, tuple]] = []

    # -- building ----------------------------------------------------------

    def _new_id(self) -> str:
        return f"n{next(self._ids)}"

    def _add(self, parent_id: str, name: str, is_dir: bool, size: int = 0) -> str:
        self._require_dir(parent_id)
        node_id = self._new_id()
        self._nodes[node_id] = _Node(
            name=name,
            is_dir=is_dir,
            parent_id=parent_id,
            size=size,
            updated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
        return node_id

    def add_dir(self, parent_id: str, name: str) -> str:
        return self._add(parent_id, name, is_dir=True)

    def add_file(self, parent_id: str, name: str, size: int = 0) -> str:
        return self._add(parent_id, name, is_dir=False, size=size)

    def name_of(self, item_id: str) -> str:
        return self._require(item_id).name

    def parent_of(self, item_id: str) -> str:
        return self._require(item_id).parent_id

    def find(self, parent_id: str, name: str) -> str | None:
        """Return the id of the child called *name*, if any."""
        for node_id, node in self._nodes.items():
            if node.parent_id == parent_id and node.name == name:
                return node_id
        return None

    # -- checks ------------------------------------------------------------

    def _require(self, item_id: str) -> _Node:
        node = self._nodes.get(item_id)
        if node is None:
            raise OperationError(f"No such item: {item_id}")
        return node

    def _require_dir(self, item_id: str) -> _Node:
        node = self._require(item_id)
        if not node.is_dir:
            raise OperationError(f"Not a directory: {item_id}")
        return node

    def _check_free(self, parent_id: str, name: str) -> None:
        if self.find(parent_id, name) is not None:
            raise OperationError(f"Name already exists: {name}")

    # -- DirectoryStore ----------------------------------------------------

    def list_dir(self, folder_id: str) -> list[DirEntry]:
        self._require_dir(folder_id)
        return [
            DirEntry(
                name=node.name,
                is_dir=node.is_dir,
                id=node_id,
                parent_id=node.parent_id,
                size=node.size,
                updated_at=node.updated_at,
            )
            for node_id, node in self._nodes.items()
            if node.parent_id == folder_id
        ]

    def rename(self, item_id: str, new_name: str) -> None:
        self.calls.append(("rename", (item_id, new_name)))
        node = self._require(item_id)
        if node.name == new_name:
            return
        self._check_free(node.parent_id, new_name)
        node.name = new_name

    def mkdir(self, parent_id: str, name: str) -> str:
        self.calls.append(("mkdir", (parent_id, name)))
        self._require_dir(parent_id)
        existing = self.find(parent_id, name)
        if existing is not None:
            if not self._nodes[existing].is_dir:
                raise OperationError(f"A file named {name} already exists")
            return existing
        return self._add(parent_id, name, is_dir=True)

    def move(self, item_ids: list[str], to_parent_id: str) -> str | None:
        self.calls.append(("move", (list(item_ids), to_parent_id)))
        self._require_dir(to_parent_id)
        for item_id in item_ids:
            node = self._require(item_id)
            if node.parent_id == to_parent_id:
                continue
            self._check_free(to_parent_id, node.name)
            node.parent_id = to_parent_id
        return None

    def remove(self, item_ids: list[str]) -> str | None:
        self.calls.append(("remove", (list(item_ids),)))
        pending = list(item_ids)
        for item_id in pending:
            self._require(item_id)
        while pending:
            item_id = pending.pop()
            pending.extend(
                child for child, node in self._nodes.items() if node.parent_id == item_id
            )
            self.trashed[item_id] = self._nodes.pop(item_id)
        return None


# ---------------------------------------------------------------------------
# Local / mounted filesystem store
# ---------------------------------------------------------------------------

TRASH_DIR_NAME = ".organizer-trash"


class LocalStore(DirectoryStore):
    """Store backed by a local or mounted directory tree.

    Ids are inode numbers, which survive renames and moves on the same
    filesystem.  Removed items are moved into a trash directory instead
    of being deleted.
    """

    def __init__(self, root: Path, trash_dir: Path | None = None):
        root = Path(root).expanduser().resolve()
        if not root.is_dir():
            raise OperationError(f"Not a directory: {root}")
        self.root = root
        self.trash_dir = Path(trash_dir).expanduser().resolve() if trash_dir else root / TRASH_DIR_NAME
        self._paths: dict[str, Path] = {}
        self.root_id = self.id_for(root)

    def id_for(self, path: Path) -> str:
        """Register *path* and return its id."""
        path = Path(path).resolve()
        try:
            item_id = str(path.stat().st_ino)
        except OSError as e:
            raise OperationError(f"Cannot stat {path}: {e}") from e
        self._paths[item_id] = path
        return item_id

    def path_of(self, item_id: str) -> Path:
        path = self._paths.get(item_id)
        if path is None or not path.exists():
            raise OperationError(f"Unknown or stale id: {item_id}")
        return path

    def _relocate(self, old: Path, new: Path) -> None:
        """Rewrite cached paths after *old* became *new*."""
        for item_id, path in list(self._paths.items()):
            if path == old:
                self._paths[item_id] = new
            elif old in path.parents:
                self._paths[item_id] = new / path.relative_to(old)

    def list_dir(self, folder_id: str) -> list[DirEntry]:
        folder = self.path_of(folder_id)
        if not folder.is_dir():
            raise OperationError(f"Not a directory: {folder}")
        entries = []
        try:
            children = sorted(folder.iterdir())
        except OSError as e:
            raise OperationError(f"Cannot list {folder}: {e}") from e
        for child in children:
            if child == self.trash_dir:
                continue
            try:
                st = child.stat()
            except OSError as e:
                # dangling symlink or an entry that vanished mid-listing
                log.warning("Skipping unreadable entry %s: %s", child, e)
                continue
            is_dir = stat.S_ISDIR(st.st_mode)
            item_id = str(st.st_ino)
            self._paths[item_id] = child
            entries.append(DirEntry(
                name=child.name,
                is_dir=is_dir,
                id=item_id,
                parent_id=folder_id,
                size=0 if is_dir else st.st_size,
                updated_at=datetime.fromtimestamp(st.st_mtime, timezone.utc).isoformat(timespec="seconds"),
            ))
        return entries

    def rename(self, item_id: str, new_name: str) -> None:
        source = self.path_of(item_id)
        dest = source.with_name(new_name)
        if dest.exists() and dest.resolve() != source.resolve():
            raise OperationError(f"Destination already exists: {dest}")
        try:
            source.rename(dest)
        except OSError as e:
            raise OperationError(str(e)) from e
        self._relocate(source, dest)
        log.debug("renamed %s -> %s", source, dest)

    def mkdir(self, parent_id: str, name: str) -> str:
        target = self.path_of(parent_id) / name
        if target.exists() and not target.is_dir():
            raise OperationError(f"A file named {name} already exists")
        try:
            target.mkdir(exist_ok=True)
        except OSError as e:
            raise OperationError(str(e)) from e
        return self.id_for(target)

    def _move_into(self, item_ids: list[str], dest_dir: Path) -> None:
        for item_id in item_ids:
            source = self.path_of(item_id)
            dest = dest_dir / source.name
            if dest == source:
                continue
            if dest.exists():
                raise OperationError(f"Destination already exists: {dest}")
            try:
                shutil.move(os.fspath(source), os.fspath(dest))
            except OSError as e:
                raise OperationError(str(e)) from e
            self._relocate(source, dest)

    def move(self, item_ids: list[str], to_parent_id: str) -> str | None:
        self._move_into(item_ids, self.path_of(to_parent_id))
        return None

    def remove(self, item_ids: list[str]) -> str | None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        try:
            self.trash_dir.mkdir(parents=True, exist_ok=True)
            # one directory per batch; same-second batches must not collide
            batch_dir = Path(tempfile.mkdtemp(prefix=f"{stamp}-", dir=self.trash_dir))
        except OSError as e:
            raise OperationError(str(e)) from e
        self._move_into(item_ids, batch_dir)
        return None
