# filename: huffman_codetable.py

"""Persisted form of a Huffman code.

The table is plain text, two lines per leaf: the decimal symbol, then the
leaf's bit-path (empty when the whole code is a single leaf)::

    70
    0
    67
    100
    ...

Leaves are written in pre-order, zero branch first. Reading does not depend
on that order.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, TextIO, Tuple

from huffman_core import (
    CodeTableConflict,
    EmptyAlphabet,
    HuffmanNode,
    InvalidPathCharacter,
    MalformedCodeTable,
    require_root,
)

log = logging.getLogger(__name__)

Entry = Tuple[int, str]


def serialize(root: Optional[HuffmanNode]) -> List[Entry]:
    entries: List[Entry] = []
    stack = [(require_root(root), "")]
    while stack:
        node, path = stack.pop()
        if node.is_leaf:
            entries.append((node.symbol, path))
        else:
            # one is pushed first so the zero branch is written first
            stack.append((node.one, path + "1"))
            stack.append((node.zero, path + "0"))
    return entries


def dumps(root: Optional[HuffmanNode]) -> str:
    return "".join(f"{symbol}\n{path}\n" for symbol, path in serialize(root))


def dump(root: Optional[HuffmanNode], fp: TextIO) -> None:
    fp.write(dumps(root))


def _check_path(path: str, symbol) -> None:
    bad = set(path) - {"0", "1"}
    if bad:
        raise InvalidPathCharacter(
            f"path {path!r} for symbol {symbol} contains {''.join(sorted(bad))!r}; only '0' and '1' are allowed"
        )


class _Slot:
    """A position of the tree under construction, addressed by its path."""

    __slots__ = ("children", "entry", "parent", "bit")

    def __init__(self, parent=None, bit=""):
        self.children = [None, None]
        self.entry = None
        self.parent = parent
        self.bit = bit

    def path(self, slots) -> str:
        bits = []
        slot = self
        while slot.parent is not None:
            bits.append(slot.bit)
            slot = slots[slot.parent]
        return "".join(reversed(bits))


def _assemble(entries: Sequence[Entry]) -> HuffmanNode:
    slots = [_Slot()]
    for symbol, path in entries:
        index = 0
        for bit in path:
            slot = slots[index]
            if slot.entry is not None:
                raise CodeTableConflict(
                    f"path {slot.entry[1]!r} of symbol {slot.entry[0]} is a prefix of path {path!r} of symbol {symbol}"
                )
            child = int(bit)
            if slot.children[child] is None:
                slot.children[child] = len(slots)
                slots.append(_Slot(index, bit))
            index = slot.children[child]
        slot = slots[index]
        if slot.entry is not None:
            raise CodeTableConflict(f"path {path!r} is used by symbols {slot.entry[0]} and {symbol}")
        if slot.children != [None, None]:
            raise CodeTableConflict(f"path {path!r} of symbol {symbol} is a prefix of another path")
        slot.entry = (symbol, path)

    # children always come after their parent, so build from the end
    nodes: List[Optional[HuffmanNode]] = [None] * len(slots)
    for index in range(len(slots) - 1, -1, -1):
        slot = slots[index]
        zero, one = slot.children
        if slot.entry is not None:
            nodes[index] = HuffmanNode(symbol=slot.entry[0])
        elif zero is None or one is None:
            missing = slot.path(slots) + ("0" if zero is None else "1")
            raise MalformedCodeTable(f"incomplete code table: no leaf under path {missing!r}")
        else:
            nodes[index] = HuffmanNode(zero=nodes[zero], one=nodes[one])
    return nodes[0]


def deserialize(entries: Iterable[Entry]) -> HuffmanNode:
    """Rebuild a decode tree from ``(symbol, path)`` entries given in any order.

    Entries are validated and placed into a scratch table of slots first; the
    frozen tree is then built bottom-up, so no half-built node is ever
    observable. Duplicate or prefix-colliding paths, and a symbol listed
    twice, raise :class:`CodeTableConflict`; a table that leaves a branch
    empty raises :class:`MalformedCodeTable`.
    """
    checked: List[Entry] = []
    seen: Dict[int, str] = {}
    for symbol, path in entries:
        if not isinstance(symbol, int) or isinstance(symbol, bool) or symbol < 0:
            raise MalformedCodeTable(f"symbol must be a non-negative integer, got {symbol!r}")
        _check_path(path, symbol)
        if symbol in seen:
            raise CodeTableConflict(f"symbol {symbol} is listed at paths {seen[symbol]!r} and {path!r}")
        seen[symbol] = path
        checked.append((symbol, path))
    if not checked:
        raise EmptyAlphabet("code table has no entries")

    root = _assemble(checked)
    log.info("loaded code table with %d symbols", len(checked))
    return root


def parse_code_table(text: str) -> List[Entry]:
    lines = [line.strip() for line in text.splitlines()]
    while lines and not lines[-1]:
        lines.pop()
    # a lone empty path on the last line loses its newline to the strip above
    if len(lines) % 2:
        lines.append("")

    entries: List[Entry] = []
    for index in range(0, len(lines), 2):
        raw_symbol, path = lines[index], lines[index + 1]
        if not raw_symbol.isdigit() or not raw_symbol.isascii():
            raise MalformedCodeTable(f"line {index + 1}: expected a non-negative integer symbol, got {raw_symbol!r}")
        symbol = int(raw_symbol)
        try:
            _check_path(path, symbol)
        except InvalidPathCharacter as exc:
            raise InvalidPathCharacter(f"line {index + 2}: {exc}") from None
        entries.append((symbol, path))
    return entries


def loads(text: str) -> HuffmanNode:
    return deserialize(parse_code_table(text))


def load(fp: TextIO) -> HuffmanNode:
    return loads(fp.read())
