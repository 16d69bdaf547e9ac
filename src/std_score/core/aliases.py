from __future__ import annotations

import functools
import pathlib
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

import yaml

from .errors import AliasTableError


DEFAULT_ALIASES_PATH = pathlib.Path(__file__).resolve().parent.parent / "data" / "aliases.yaml"


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses to silently drop a repeated mapping key."""


def _construct_unique_mapping(loader: yaml.SafeLoader, node: yaml.MappingNode, deep: bool = False):
    seen = set()
    for key_node, _ in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if isinstance(key, str):
            if key in seen:
                raise AliasTableError(f"duplicate alias key {key!r} (line {key_node.start_mark.line + 1})")
            seen.add(key)
    return loader.construct_mapping(node, deep=deep)


_UniqueKeyLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping)


class AliasTable:
    """Read-only lookup from lowercase raw names to canonical display names.

    Keys are case-folded on load and two keys that only differ in case are
    rejected. Values are kept verbatim.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        table: Dict[str, str] = {}
        origin: Dict[str, str] = {}
        for key, value in (mapping or {}).items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise AliasTableError(f"alias entries must map strings to strings, got {key!r}: {value!r}")
            folded = key.lower()
            if folded in table:
                raise AliasTableError(f"alias keys {origin[folded]!r} and {key!r} collide after lowercasing")
            table[folded] = value
            origin[folded] = key
        self._table = MappingProxyType(table)

    def resolve(self, raw_name: str) -> str:
        return self._table.get(raw_name.lower(), raw_name)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self._table.items()))

    def __contains__(self, raw_name: object) -> bool:
        return isinstance(raw_name, str) and raw_name.lower() in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"AliasTable({dict(self._table)!r})"


def load_aliases(path: pathlib.Path | str) -> AliasTable:
    """Load an alias table from a YAML mapping file."""
    text = pathlib.Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise AliasTableError(f"invalid alias file {path}: {exc}") from exc
    if data is None:
        return AliasTable()
    if not isinstance(data, dict):
        raise AliasTableError(f"alias file {path} must contain a mapping, got {type(data).__name__}")
    return AliasTable(data)


@functools.lru_cache(maxsize=None)
def default_aliases() -> AliasTable:
    # Loaded once per process
    return load_aliases(DEFAULT_ALIASES_PATH)

