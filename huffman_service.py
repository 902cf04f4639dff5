# filename: huffman_service.py

from collections import Counter
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional, TextIO, Tuple, Union

import huffman_codetable
from huffman_core import Frequencies, HuffmanLogic, HuffmanNode, require_root
from huffman_decoder import translate


class HuffmanService:
    """A Huffman code that can be saved, reloaded and used to decode bits."""

    def __init__(self, root: Optional[HuffmanNode] = None):
        self.logic = HuffmanLogic()
        self._root = root

    @classmethod
    def from_frequencies(cls, frequencies: Frequencies) -> "HuffmanService":
        service = cls()
        service._root = service.logic.build_tree(frequencies)
        return service

    @classmethod
    def from_data(cls, data: bytes) -> "HuffmanService":
        # Frequency analysis of the input byte data
        return cls.from_frequencies(Counter(data))

    @classmethod
    def from_code_table(cls, source: Union[str, TextIO]) -> "HuffmanService":
        if isinstance(source, str):
            return cls(huffman_codetable.loads(source))
        return cls(huffman_codetable.load(source))

    @property
    def root(self) -> HuffmanNode:
        return require_root(self._root)

    def code_table(self) -> List[Tuple[int, str]]:
        return huffman_codetable.serialize(self.root)

    def codes(self) -> Dict[int, str]:
        return self.logic.generate_codes(self.root)

    def save(self, output: TextIO) -> None:
        huffman_codetable.dump(self.root, output)

    def translate(self, bits: Iterable[int]) -> Iterator[int]:
        return translate(self.root, bits)

    def write_decoded(self, bits: Iterable[int], output: BinaryIO) -> int:
        """Decode ``bits`` and write one byte per symbol to ``output``.

        Returns the number of bytes written. Symbols above 255 cannot be
        written as a byte and raise ``ValueError``.
        """
        written = 0
        for symbol in self.translate(bits):
            if symbol > 255:
                raise ValueError(f"symbol {symbol} does not fit in a byte")
            output.write(bytes((symbol,)))
            written += 1
        return written

    def decompress(self, bits: Iterable[int]) -> bytes:
        return bytes(self.translate(bits))
