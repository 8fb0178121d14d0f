"""Symbolic-link key index over document data files.

Every indexable key of a saved document is a symlink under its key
schema's ``keys/`` tree pointing at the document's data file through a
relative target. Links carry no payload and resolve in one hop.

A composite key owns one identity link for the whole key plus one link
per sub-slot. Sub-slot links may be shared by documents that agree on
one slot, so they only identify a document when they all agree.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Iterable

from core.constants import KEYS_DIR_NAME
from core.errors import BrokenTargetError, StoreReadError, StoreWriteError
from core.logging_config import get_logger
from core.types import CompositeKey, Keys, ScalarKey
from store.path_deriver import PathDeriver

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class KeyLinks:
    """Link paths derived from one key.

    Attributes:
        primary: Link that identifies the document on its own.
        slot_links: Composite sub-slot links, in slot order.
    """

    primary: Path | None
    slot_links: tuple[Path, ...] = ()

    @property
    def paths(self) -> list[Path]:
        head = [self.primary] if self.primary is not None else []
        return head + list(self.slot_links)


def distinct_paths(groups: Iterable[KeyLinks]) -> list[Path]:
    """Flatten link groups into distinct paths, keeping first-seen order."""
    paths: list[Path] = []
    for group in groups:
        for path in group.paths:
            if path not in paths:
                paths.append(path)
    return paths


class KeyLinkIndex:
    """Maintains and resolves key links for one store root."""

    def __init__(self, deriver: PathDeriver, file_handle_schema_uri: str) -> None:
        self._deriver = deriver
        self._file_handle_schema_uri = file_handle_schema_uri

    def link_groups(self, keys: Keys) -> list[KeyLinks]:
        """Derive the link paths of every indexable key, file handle excluded.

        Args:
            keys: Document keys in caller order.

        Returns:
            One group per indexable key, in key order.
        """
        groups: list[KeyLinks] = []
        for schema_uri, key_value in keys:
            if schema_uri == self._file_handle_schema_uri:
                continue
            if isinstance(key_value, CompositeKey):
                group = KeyLinks(
                    primary=self._deriver.composite_link_path(schema_uri, key_value),
                    slot_links=tuple(self._deriver.key_link_paths(schema_uri, key_value)),
                )
            else:
                group = KeyLinks(primary=self._deriver.key_link_path(schema_uri, key_value))
            if not group.paths:
                _LOGGER.info("key_skipped", key_schema_uri=schema_uri, key_value=str(key_value))
                continue
            groups.append(group)
        return groups

    def link_paths(self, keys: Keys) -> list[Path]:
        """Return the distinct link paths of every indexable key."""
        return distinct_paths(self.link_groups(keys))

    def resolve(self, keys: Keys) -> Path | None:
        """Resolve keys to the data file of the first matching key.

        A file handle key naming an existing file wins; otherwise keys
        are checked in order. A regular file found at a link path is
        itself the data file.

        Args:
            keys: Keys to resolve.

        Returns:
            Data file path, or None when no key resolves.

        Raises:
            StoreReadError: If an existing link cannot be read.
        """
        file_handle = self.file_handle(keys)
        if file_handle is not None and file_handle.is_file():
            return file_handle
        for group in self.link_groups(keys):
            data_path = self.resolve_group(group)
            if data_path is not None:
                return data_path
        _LOGGER.debug("keys_unresolved", key_schema_uris=list(keys.schema_uris))
        return None

    def resolve_group(self, group: KeyLinks) -> Path | None:
        """Resolve the links of one key to a single data file.

        The primary link wins. Without it, composite sub-slot links
        resolve only when every one of them reaches the same data file.

        Args:
            group: Links derived from one key.

        Returns:
            Data file path, or None when the key does not identify one file.
        """
        if group.primary is not None:
            data_path = self.resolve_link(group.primary)
            if data_path is not None:
                return data_path
        if not group.slot_links:
            return None
        targets = {self.resolve_link(link_path) for link_path in group.slot_links}
        if len(targets) == 1 and None not in targets:
            return targets.pop()
        if len(targets - {None}) > 1:
            _LOGGER.info(
                "composite_key_ambiguous",
                slot_links=[str(link_path) for link_path in group.slot_links],
            )
        return None

    def resolve_link(self, link_path: Path) -> Path | None:
        """Resolve one link path to its data file.

        Args:
            link_path: Candidate key link path.

        Returns:
            Data file path, or None for missing, dangling, or chained links.

        Raises:
            StoreReadError: If the link target cannot be read.
        """
        if not link_path.is_symlink():
            if link_path.is_file():
                return link_path
            return None
        try:
            target = Path(os.path.normpath(link_path.parent / os.readlink(link_path)))
        except OSError as error:
            raise StoreReadError(
                f"Unable to dereference key link {link_path}: {error}.", path=link_path
            ) from error
        if target.is_symlink():
            _LOGGER.warning("key_link_chained", link_path=str(link_path), target=str(target))
            return None
        if not target.is_file():
            return None
        return target

    def file_handle(self, keys: Keys) -> Path | None:
        """Return the file handle key value as a path, when present."""
        key_value = keys.value(self._file_handle_schema_uri)
        if not isinstance(key_value, ScalarKey) or key_value.value is None:
            return None
        return Path(key_value.value)

    def write(self, link_path: Path, target_path: Path) -> None:
        """Create or replace a key link pointing at a data file.

        Args:
            link_path: Link location.
            target_path: Existing data file.

        Raises:
            BrokenTargetError: If the data file does not exist.
            StoreWriteError: If the link cannot be created.
        """
        if not target_path.is_file():
            _LOGGER.error("key_link_target_missing", link_path=str(link_path), target=str(target_path))
            raise BrokenTargetError(
                f"Attempted to link {link_path} to non-existent data file {target_path}. "
                "Write the data file before its key links.",
                path=target_path,
            )
        try:
            relative_target = os.path.relpath(target_path, link_path.parent)
            link_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.parent.mkdir(parents=True, exist_ok=True)
            if link_path.is_symlink() or link_path.is_file():
                link_path.unlink()
            os.symlink(relative_target, link_path)
        except OSError as error:
            _LOGGER.error("key_link_write_failed", link_path=str(link_path), error=str(error))
            raise StoreWriteError(
                f"Failed to write key link {link_path}: {error}. "
                "Check directory permissions and retry the save.",
                path=link_path,
            ) from error
        _LOGGER.debug("key_link_written", link_path=str(link_path), target=relative_target)

    def remove_links_to(self, link_paths: list[Path], target_path: Path) -> list[Path]:
        """Remove the given links that point at a data file.

        Args:
            link_paths: Candidate link paths.
            target_path: Data file the links must point at.

        Returns:
            Removed link paths.

        Raises:
            StoreWriteError: If a link cannot be read or a matching link removed.
        """
        removed: list[Path] = []
        canonical_target = Path(os.path.normpath(target_path))
        for link_path in link_paths:
            if not link_path.is_symlink():
                continue
            try:
                target = Path(os.path.normpath(link_path.parent / os.readlink(link_path)))
            except FileNotFoundError:
                continue
            except OSError as error:
                raise StoreWriteError(
                    f"Unable to dereference key link {link_path}: {error}.", path=link_path
                ) from error
            if target != canonical_target:
                continue
            try:
                link_path.unlink()
            except FileNotFoundError:
                continue
            except OSError as error:
                raise StoreWriteError(
                    f"Failed to remove key link {link_path}: {error}.", path=link_path
                ) from error
            removed.append(link_path)
        return removed

    def prune_dangling(self) -> list[Path]:
        """Remove every key link whose data file no longer exists.

        Returns:
            Removed link paths, sorted.

        Raises:
            StoreWriteError: If a dangling link cannot be removed.
        """
        data_root = self._deriver.data_root
        removed: list[Path] = []
        if not data_root.is_dir():
            return removed
        for dir_path, _, file_names in os.walk(data_root):
            directory = Path(dir_path)
            if KEYS_DIR_NAME not in directory.relative_to(data_root).parts:
                continue
            for file_name in file_names:
                link_path = directory / file_name
                if not link_path.is_symlink() or link_path.exists():
                    continue
                try:
                    link_path.unlink()
                except OSError as error:
                    raise StoreWriteError(
                        f"Failed to prune key link {link_path}: {error}.", path=link_path
                    ) from error
                _LOGGER.info("dangling_link_pruned", link_path=str(link_path))
                removed.append(link_path)
        return sorted(removed)
