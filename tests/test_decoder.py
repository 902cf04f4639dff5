import itertools
import random

import pytest
from bitarray import bitarray

from huffman_core import EmptyAlphabet, HuffmanLogic, HuffmanNode, TruncatedStream
from huffman_decoder import BitReader, translate

CLASSIC = {ord('A'): 5, ord('B'): 9, ord('C'): 12, ord('D'): 13, ord('E'): 16, ord('F'): 45}


def _build(freqs):
	return HuffmanLogic().build_tree(freqs)


def _encode_bits(codes, symbols):
	return [int(bit) for symbol in symbols for bit in codes[symbol]]


def test_decodes_hand_built_bitstream():
	root = _build(CLASSIC)
	# F A C E B A D  ->  0 1100 100 111 1101 1100 101
	bits = BitReader.from_text("0 1100 100 111 1101 1100 101")
	assert bytes(translate(root, bits)) == b"FACEBAD"


def test_decodes_what_the_codes_describe():
	rng = random.Random(5)
	freqs = {s: rng.randint(1, 40) for s in range(32)}
	root = _build(freqs)
	codes = HuffmanLogic().generate_codes(root)
	symbols = [rng.choice(list(freqs)) for _ in range(2000)]
	assert list(translate(root, _encode_bits(codes, symbols))) == symbols


def test_translate_is_lazy():
	root = _build(CLASSIC)
	forever = itertools.cycle([0, 1, 1, 1])  # F E F E ...
	assert bytes(itertools.islice(translate(root, forever), 6)) == b"FEFEFE"


def test_empty_bitstream_decodes_nothing():
	assert list(translate(_build(CLASSIC), [])) == []


def test_truncated_code_emits_nothing():
	root = _build(CLASSIC)
	out = []
	with pytest.raises(TruncatedStream):
		for symbol in translate(root, [1, 1, 0]):
			out.append(symbol)
	assert out == []


def test_truncation_after_complete_symbols():
	root = _build(CLASSIC)
	out = []
	with pytest.raises(TruncatedStream, match="2 bit"):
		for symbol in translate(root, BitReader.from_text("0 100 11")):
			out.append(symbol)
	assert bytes(out) == b"FC"


def test_depth_three_tree_with_two_bits():
	root = HuffmanNode(
		4,
		zero=_leaf(1),
		one=HuffmanNode(3, zero=_leaf(2), one=HuffmanNode(2, zero=_leaf(3), one=_leaf(4))),
	)
	with pytest.raises(TruncatedStream):
		list(translate(root, [1, 1]))


def test_truncated_stream_is_eof_error():
	with pytest.raises(EOFError):
		list(translate(_build(CLASSIC), [1]))


def test_single_symbol_code_emits_one_symbol_per_bit():
	root = _build({65: 3})
	assert bytes(translate(root, [0, 1, 0])) == b"AAA"
	assert list(translate(root, [])) == []


def test_rejects_non_binary_bits():
	with pytest.raises(ValueError):
		list(translate(_build(CLASSIC), [0, 2]))
	with pytest.raises(ValueError):
		list(translate(_build({65: 1}), [5]))


def test_missing_tree_fails_before_iteration():
	with pytest.raises(EmptyAlphabet):
		translate(None, [0, 1])


def test_bit_reader_from_bytes_trims_padding():
	reader = BitReader.from_bytes(b"\xa0", bit_length=3)
	assert len(reader) == 3
	assert list(reader) == [1, 0, 1]
	assert not reader.has_next_bit()


def test_bit_reader_without_length_reads_whole_bytes():
	assert list(BitReader.from_bytes(b"\x81")) == [1, 0, 0, 0, 0, 0, 0, 1]


def test_bit_reader_next_bit():
	reader = BitReader.from_text("10")
	assert reader.has_next_bit()
	assert reader.next_bit() == 1
	assert reader.next_bit() == 0
	with pytest.raises(EOFError):
		reader.next_bit()


def test_bit_reader_rejects_bad_input():
	with pytest.raises(ValueError):
		BitReader.from_text("01x1")
	with pytest.raises(ValueError):
		BitReader.from_bytes(b"\x00", bit_length=9)
	with pytest.raises(ValueError):
		BitReader.from_bytes(b"\x00", bit_length=-1)


@pytest.mark.timeout(120)
def test_decode_packed_megabit_stream():
	rng = random.Random(1)
	data = bytes(rng.choice(b"etaoin shrdlu") for _ in range(200_000))
	root = HuffmanLogic().build_tree(_counts(data))
	codes = HuffmanLogic().generate_codes(root)

	bits = bitarray("".join(codes[b] for b in data), endian="big")
	reader = BitReader.from_bytes(bits.tobytes(), bit_length=len(bits))
	assert bytes(translate(root, reader)) == data


def _leaf(symbol):
	return HuffmanNode(1, symbol)


def _counts(data):
	counts = [0] * 256
	for b in data:
		counts[b] += 1
	return counts


def test_decodes_through_a_deep_tree():
	weights = [1, 2]
	while len(weights) < 1100:
		weights.append(weights[-1] + weights[-2])
	root = HuffmanLogic().build_tree(dict(enumerate(weights)))
	codes = HuffmanLogic().generate_codes(root)
	deepest = max(codes, key=lambda s: len(codes[s]))
	symbols = [deepest, 1099, deepest]
	assert list(translate(root, _encode_bits(codes, symbols))) == symbols
