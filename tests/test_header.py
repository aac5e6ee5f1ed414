import pytest

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.errors import InvalidData, InvalidImageDimensions
from pngcore.header import ColorType, ImageHeader, Interlace, parse_ihdr, read_header
from pngbuild import ihdr


def test_parse_fields():
    header = parse_ihdr(ihdr(640, 480, 8, 6, interlace=1))
    assert header == ImageHeader(640, 480, 8, ColorType.TRUECOLOR_ALPHA, 0, 0, Interlace.ADAM7)
    assert header.channels == 4
    assert header.bits_per_pixel == 32
    assert header.filter_distance == 4


def test_header_is_immutable():
    header = parse_ihdr(ihdr(1, 1))
    with pytest.raises(AttributeError):
        header.width = 2


@pytest.mark.parametrize('width, height', [(0, 10), (10, 0), (0, 0)])
def test_zero_dimensions(width, height):
    with pytest.raises(InvalidImageDimensions):
        parse_ihdr(ihdr(width, height))


def test_dimensions_checked_before_bit_depth():
    with pytest.raises(InvalidImageDimensions):
        parse_ihdr(ihdr(0, 10, bit_depth=3))


@pytest.mark.parametrize('bit_depth, color_type', [
    (1, 0), (2, 0), (4, 0), (8, 0), (16, 0),
    (8, 2), (16, 2),
    (1, 3), (2, 3), (4, 3), (8, 3),
    (8, 4), (16, 4),
    (8, 6), (16, 6),
])
def test_legal_combinations(bit_depth, color_type):
    header = parse_ihdr(ihdr(4, 4, bit_depth, color_type))
    assert header.bit_depth == bit_depth
    assert header.color_type == color_type


def test_illegal_bit_depth():
    with pytest.raises(InvalidData, match='Invalid bit depth 3'):
        parse_ihdr(ihdr(4, 4, 3, 0))


@pytest.mark.parametrize('bit_depth, color_type', [
    (16, 3), (1, 2), (4, 2), (2, 4), (4, 6),
])
def test_illegal_combinations_name_depth_and_color(bit_depth, color_type):
    with pytest.raises(InvalidData, match=f'bit depth {bit_depth} for color type {color_type}'):
        parse_ihdr(ihdr(4, 4, bit_depth, color_type))


def test_unknown_color_type():
    with pytest.raises(InvalidData, match='Invalid color type 5'):
        parse_ihdr(ihdr(4, 4, 8, 5))


@pytest.mark.parametrize('fields, message', [
    (dict(compression=1), 'compression method'),
    (dict(filter_method=1), 'filter method'),
    (dict(interlace=2), 'interlace method'),
])
def test_method_fields(fields, message):
    with pytest.raises(InvalidData, match=message):
        parse_ihdr(ihdr(4, 4, 8, 0, **fields))


def test_wrong_payload_size():
    with pytest.raises(InvalidData, match='13 bytes'):
        parse_ihdr(ihdr(4, 4)[:12])


def test_read_header_rejects_other_chunk():
    with pytest.raises(InvalidData, match='Expected IHDR'):
        read_header(RawChunk(0, ChunkKind.IEND, b'', 0, 0))


@pytest.mark.parametrize('width, expected', [(32, 4), (33, 5), (1, 1), (8, 1), (9, 2)])
def test_bytes_per_scanline_rounds_up(width, expected):
    header = parse_ihdr(ihdr(width, 1, 1, 0))
    assert header.bytes_per_scanline() == expected


def test_bytes_per_scanline_wide_pixels():
    header = parse_ihdr(ihdr(3, 1, 16, 6))
    assert header.bytes_per_scanline() == 24
    assert header.bytes_per_scanline(1) == 8
