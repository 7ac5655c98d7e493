# src/railsi18n/document.py
"""
Locale document model.

Parses the text of one Rails locale file into a YAML node graph and
flattens it into dotted keys.  Parsing goes through PyYAML's composer rather
than ``safe_load`` so every value keeps the marks needed to point back at
its definition.

Example::

    doc = YAMLDocument.parse("en:\\n  hello:\\n    world: Hello!\\n")
    translation = doc.to_translation()
    translation.locale               # "en"
    translation.entries              # {"hello.world": "Hello!"}
    doc.span_for("hello.world")      # SourceSpan(line=2, column=11, ...)
"""
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from .errors import MalformedDocument, ShapeError
from .models import SourceSpan, Translation

MERGE_TAG = "tag:yaml.org,2002:merge"
NULL_TAG = "tag:yaml.org,2002:null"


def _span(node: Node) -> SourceSpan:
    return SourceSpan(
        line=node.start_mark.line,
        column=node.start_mark.column,
        end_line=node.end_mark.line,
        end_column=node.end_mark.column,
    )


def _malformed(message: str, node: Node) -> MalformedDocument:
    return MalformedDocument(message, node.start_mark.line, node.start_mark.column)


class YAMLDocument:
    """
    A parsed locale document.

    Instances are immutable snapshots: a reload of the file produces a new
    ``YAMLDocument`` rather than mutating the old one.

    Attributes:
        root (Optional[Node]): Root node, None for an empty document
    """

    def __init__(self, root: Optional[Node]):
        self.root = root
        self._translation: Optional[Translation] = None

    @classmethod
    def parse(cls, text: str) -> "YAMLDocument":
        """
        Parse YAML text.

        Args:
            text (str): Full content of the locale file

        Returns:
            YAMLDocument: The parsed document

        Raises:
            MalformedDocument: If the text is not a single valid YAML document
        """
        try:
            root = yaml.compose(text, Loader=yaml.SafeLoader)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            raise MalformedDocument(
                e.problem or str(e),
                mark.line if mark else None,
                mark.column if mark else None,
            ) from e
        except yaml.YAMLError as e:
            raise MalformedDocument(str(e)) from e
        except RecursionError as e:
            raise MalformedDocument("Document is nested too deeply") from e
        return cls(root)

    def to_translation(self) -> Translation:
        """
        Flatten the document into a :class:`Translation`.

        The single top-level key is the locale; nested mappings below it
        become dotted keys.  Null values are skipped and sequences become a
        single leaf.

        Raises:
            ShapeError: If the document does not have exactly one top-level key
            MalformedDocument: On non-scalar keys, bad merge keys or recursive aliases
        """
        if self._translation is not None:
            return self._translation

        if not isinstance(self.root, MappingNode):
            raise ShapeError(0)

        pairs = self._mapping_pairs(self.root)
        if len(pairs) != 1:
            raise ShapeError(len(pairs))

        locale, body = pairs[0]
        translation = Translation(locale=locale)
        if isinstance(body, MappingNode):
            self._flatten_mapping(body, "", translation, {id(self.root)})
        elif not (isinstance(body, ScalarNode) and body.tag == NULL_TAG):
            raise _malformed(f"Locale '{locale}' must contain a mapping of keys", body)

        self._translation = translation
        return translation

    def span_for(self, key: str) -> Optional[SourceSpan]:
        """Return the source span of a flattened key, if the document defines it."""
        return self.to_translation().spans.get(key)

    @property
    def locale(self) -> str:
        return self.to_translation().locale

    # ── flattening ──────────────────────────────────────────────────────

    def _mapping_pairs(self, node: MappingNode, merging: FrozenSet[int] = frozenset()) -> List[Tuple[str, Node]]:
        """Key/value pairs of a mapping with ``<<`` merges applied (explicit keys win)."""
        if id(node) in merging:
            raise _malformed("Recursive alias", node)
        merging = merging | {id(node)}

        merged: List[Tuple[str, Node]] = []
        explicit: List[Tuple[str, Node]] = []
        for key_node, value_node in node.value:
            if key_node.tag == MERGE_TAG:
                sources = value_node.value if isinstance(value_node, SequenceNode) else [value_node]
                # earlier sources take precedence over later ones
                for source in reversed(sources):
                    if not isinstance(source, MappingNode):
                        raise _malformed("Merge key expects a mapping or a list of mappings", source)
                    merged.extend(self._mapping_pairs(source, merging))
                continue
            if not isinstance(key_node, ScalarNode):
                raise _malformed("Mapping keys must be scalars", key_node)
            explicit.append((key_node.value, value_node))

        pairs: Dict[str, Node] = {}
        for key, value in merged + explicit:
            pairs[key] = value
        return list(pairs.items())

    def _flatten_mapping(self, node: MappingNode, prefix: str,
                         translation: Translation, ancestors: Set[int]) -> None:
        if id(node) in ancestors:
            raise _malformed("Recursive alias", node)
        ancestors = ancestors | {id(node)}

        for key, child in self._mapping_pairs(node):
            path = f"{prefix}.{key}" if prefix else key
            if isinstance(child, MappingNode):
                self._flatten_mapping(child, path, translation, ancestors)
            elif isinstance(child, SequenceNode):
                translation.entries[path] = self._render_value(child, ancestors)
                translation.spans[path] = _span(child)
            elif child.tag != NULL_TAG:
                translation.entries[path] = child.value
                translation.spans[path] = _span(child)

    def _render_value(self, node: Node, ancestors: Set[int]) -> str:
        if isinstance(node, ScalarNode):
            return "" if node.tag == NULL_TAG else node.value
        if id(node) in ancestors:
            raise _malformed("Recursive alias", node)
        ancestors = ancestors | {id(node)}
        if isinstance(node, SequenceNode):
            return "[" + ", ".join(self._render_value(item, ancestors) for item in node.value) + "]"
        return "{" + ", ".join(
            f"{key}: {self._render_value(value, ancestors)}"
            for key, value in self._mapping_pairs(node)
        ) + "}"
