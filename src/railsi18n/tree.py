# src/railsi18n/tree.py
"""
Translation tree store.

Holds one tree per (workspace unit, locale).  Tree nodes are key path
segments; a node may carry a leaf value and children at the same time, so
``a.b`` and ``a.b.c`` can both be defined.

Every leaf is tagged with the document that defined it.  Merging a document
first withdraws everything that document contributed before and then writes
its current keys, so a key deleted from a file disappears on reload.  When
two documents of one unit define the same key the one merged last wins; the
older value is kept as a shadowed contribution and becomes visible again if
the winning document drops the key or is removed.

Lookups never walk the tree: they go through a flat ``key -> value`` index
per (unit, locale) which is rebuilt by :meth:`TranslationTreeStore.update_lookup_maps`.
Callers that merge in batches rebuild once at the end of the batch; until
then lookups see the previous index.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .document import YAMLDocument
from .models import Translation, TranslationLeaf, WorkspaceUnit

logger = logging.getLogger(__name__)


class TreeNode:
    __slots__ = ("children", "leaf", "shadowed")

    def __init__(self):
        self.children: Dict[str, "TreeNode"] = {}
        self.leaf: Optional[TranslationLeaf] = None
        # overridden contributions, oldest first
        self.shadowed: List[TranslationLeaf] = []

    def is_empty(self) -> bool:
        return self.leaf is None and not self.children


class LocaleTree:
    """The keys of one locale within one workspace unit."""

    def __init__(self, locale: str):
        self.locale = locale
        self.root = TreeNode()

    def insert(self, key: str, leaf: TranslationLeaf) -> None:
        node = self.root
        for segment in key.split("."):
            node = node.children.setdefault(segment, TreeNode())
        if node.leaf is not None:
            node.shadowed.append(node.leaf)
        node.leaf = leaf

    def remove(self, key: str, document_id: str) -> bool:
        """
        Withdraw the contribution of *document_id* for *key*.

        Returns:
            bool: True if the document had a contribution for the key
        """
        segments = key.split(".")
        trail = [self.root]
        for segment in segments:
            child = trail[-1].children.get(segment)
            if child is None:
                return False
            trail.append(child)

        node = trail[-1]
        if node.leaf is not None and node.leaf.document_id == document_id:
            node.leaf = node.shadowed.pop() if node.shadowed else None
        else:
            remaining = [leaf for leaf in node.shadowed if leaf.document_id != document_id]
            if len(remaining) == len(node.shadowed):
                return False
            node.shadowed = remaining

        # prune emptied nodes bottom-up
        for depth in range(len(segments), 0, -1):
            if not trail[depth].is_empty():
                break
            del trail[depth - 1].children[segments[depth - 1]]
        return True

    def find(self, key: str) -> Optional[TreeNode]:
        node = self.root
        if not key:
            return node
        for segment in key.split("."):
            node = node.children.get(segment)
            if node is None:
                return None
        return node

    def walk(self, node: Optional[TreeNode] = None, prefix: str = "") -> Iterator[Tuple[str, TranslationLeaf]]:
        """Yield ``(dotted key, visible leaf)`` for every leaf below *node*."""
        node = self.root if node is None else node
        for segment, child in node.children.items():
            key = f"{prefix}.{segment}" if prefix else segment
            if child.leaf is not None:
                yield key, child.leaf
            yield from self.walk(child, key)

    def is_empty(self) -> bool:
        return self.root.is_empty()


@dataclass
class DocumentRecord:
    """What a merged document currently owns, for O(owned keys) removal."""
    document_id: str
    unit_key: str
    locale: str
    keys: Set[str] = field(default_factory=set)
    document: Optional[YAMLDocument] = None


class TranslationTreeStore:
    """
    Per-workspace, per-locale translation trees with document ownership.

    All operations take the :class:`WorkspaceUnit` explicitly; nothing is
    shared between units.
    """

    def __init__(self):
        self.init()

    def init(self) -> None:
        """Reset to an empty store."""
        self._trees: Dict[str, Dict[str, LocaleTree]] = {}
        self._lookup: Dict[str, Dict[str, Dict[str, str]]] = {}
        # (unit key, document id) -> record; one file may be loaded by several units
        self._documents: Dict[Tuple[str, str], DocumentRecord] = {}
        self._dirty: Set[Tuple[str, str]] = set()

    # ── mutation ───────────────────────────────────────────────────────

    def merge_document(
        self,
        translation: Translation,
        document: Optional[YAMLDocument],
        unit: WorkspaceUnit,
        document_id: str,
        *,
        rebuild_index_immediately: bool = True,
    ) -> None:
        """
        Replace the contribution of one document with its current content.

        Args:
            translation: Flattened content of the document
            document: The parsed document, kept for span lookups
            unit: Workspace unit the document belongs to
            document_id: Stable identifier of the document (its path)
            rebuild_index_immediately: Rebuild the lookup index before returning;
                pass False when merging a batch and call :meth:`update_lookup_maps` once
        """
        self._withdraw((unit.key, document_id))

        locale = translation.locale
        trees = self._trees.setdefault(unit.key, {})
        tree = trees.get(locale)
        if tree is None:
            tree = trees[locale] = LocaleTree(locale)

        for key, value in translation.entries.items():
            tree.insert(key, TranslationLeaf(value, document_id, translation.spans.get(key)))

        self._documents[(unit.key, document_id)] = DocumentRecord(
            document_id=document_id,
            unit_key=unit.key,
            locale=locale,
            keys=set(translation.entries),
            document=document,
        )
        self._dirty.add((unit.key, locale))
        self._prune(unit.key, locale)
        logger.debug("merged %s: %d keys into %s/%s", document_id, len(translation), unit.name, locale)

        if rebuild_index_immediately:
            self.update_lookup_maps()

    def remove_document(self, document_id: str, unit: Optional[WorkspaceUnit] = None, *,
                        rebuild_index_immediately: bool = True) -> bool:
        """
        Remove every leaf owned by a document (e.g. after it was deleted from disk).

        Args:
            document_id: Identifier the document was merged with
            unit: Restrict removal to one unit; by default every unit that loaded it

        Returns:
            bool: False if the document was never merged
        """
        owners = [
            owner for owner in self._documents
            if owner[1] == document_id and (unit is None or owner[0] == unit.key)
        ]
        for owner in owners:
            self._withdraw(owner)
        if owners and rebuild_index_immediately:
            self.update_lookup_maps()
        return bool(owners)

    def remove_unit(self, unit: WorkspaceUnit) -> None:
        """Drop everything belonging to a workspace unit that was closed."""
        self._trees.pop(unit.key, None)
        self._lookup.pop(unit.key, None)
        self._documents = {
            owner: record for owner, record in self._documents.items()
            if record.unit_key != unit.key
        }
        self._dirty = {pair for pair in self._dirty if pair[0] != unit.key}

    def update_lookup_maps(self) -> int:
        """
        Rebuild the lookup index of every (unit, locale) changed since the last rebuild.

        Returns:
            int: Number of indexes rebuilt or dropped
        """
        count = 0
        for unit_key, locale in self._dirty:
            tree = self._trees.get(unit_key, {}).get(locale)
            if tree is None:
                unit_index = self._lookup.get(unit_key)
                if unit_index is not None:
                    unit_index.pop(locale, None)
                    if not unit_index:
                        del self._lookup[unit_key]
            else:
                self._lookup.setdefault(unit_key, {})[locale] = {
                    key: leaf.value for key, leaf in tree.walk()
                }
            count += 1
        self._dirty.clear()
        return count

    def _withdraw(self, owner: Tuple[str, str]) -> bool:
        record = self._documents.pop(owner, None)
        if record is None:
            return False
        tree = self._trees.get(record.unit_key, {}).get(record.locale)
        if tree is not None:
            for key in record.keys:
                tree.remove(key, record.document_id)
            self._prune(record.unit_key, record.locale)
        self._dirty.add((record.unit_key, record.locale))
        return True

    def _prune(self, unit_key: str, locale: str) -> None:
        trees = self._trees.get(unit_key)
        if trees is None:
            return
        tree = trees.get(locale)
        if tree is not None and tree.is_empty():
            del trees[locale]
        if not trees:
            del self._trees[unit_key]

    # ── queries ────────────────────────────────────────────────────────

    def get_translation(self, key: str, locale: str, unit: WorkspaceUnit) -> Optional[str]:
        """Return the text for *key* in *locale*, or None when it is not defined."""
        return self._lookup.get(unit.key, {}).get(locale, {}).get(key)

    def get_leaf(self, key: str, locale: str, unit: WorkspaceUnit) -> Optional[TranslationLeaf]:
        """Return the visible leaf (value, owning document, span) for *key*."""
        tree = self._trees.get(unit.key, {}).get(locale)
        if tree is None:
            return None
        node = tree.find(key)
        return node.leaf if node is not None else None

    def locales(self, unit: WorkspaceUnit) -> List[str]:
        return sorted(self._trees.get(unit.key, {}))

    def has_locale(self, unit: WorkspaceUnit, locale: str) -> bool:
        return locale in self._trees.get(unit.key, {})

    def keys(self, unit: WorkspaceUnit, locale: str, prefix: str = "") -> List[str]:
        """Sorted dotted keys with a leaf at or below *prefix*."""
        tree = self._trees.get(unit.key, {}).get(locale)
        if tree is None:
            return []
        node = tree.find(prefix)
        if node is None:
            return []
        found = [key for key, _ in tree.walk(node, prefix)]
        if prefix and node.leaf is not None:
            found.append(prefix)
        return sorted(found)

    def documents(self, unit: WorkspaceUnit) -> List[str]:
        return sorted(doc_id for unit_key, doc_id in self._documents if unit_key == unit.key)

    def document_ids(self) -> List[str]:
        return sorted({doc_id for _, doc_id in self._documents})

    def get_document(self, document_id: str, unit: WorkspaceUnit) -> Optional[YAMLDocument]:
        record = self._documents.get((unit.key, document_id))
        return record.document if record is not None else None

    @property
    def is_stale(self) -> bool:
        """True while merges are pending an index rebuild."""
        return bool(self._dirty)


# Global store shared by the resolver
i18n_tree = TranslationTreeStore()
