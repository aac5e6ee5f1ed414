import logging
from typing import Iterator, NamedTuple, Optional

import numpy as np

from pngcore.errors import InvalidData
from pngcore.header import ImageHeader, Interlace

logger = logging.getLogger(__name__)

FILTER_NONE = 0
FILTER_SUB = 1
FILTER_UP = 2
FILTER_AVERAGE = 3
FILTER_PAETH = 4


class Pass(NamedTuple):
    start_col: int
    start_row: int
    col_step: int
    row_step: int
    width: int
    height: int


#(start col, start row, col step, row step) for Adam7 passes 1..7
ADAM7 = (
    (0, 0, 8, 8),
    (4, 0, 8, 8),
    (0, 4, 4, 8),
    (2, 0, 4, 4),
    (0, 2, 2, 4),
    (1, 0, 2, 2),
    (0, 1, 1, 2),
)


def paeth_predictor(a: int, b: int, c: int) -> int:
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    elif pb <= pc:
        return b
    else:
        return c


def unfilter_row(filter_type: int, row: bytes, prev_row: Optional[bytes], bpp: int) -> bytes:
    """Undo one scanline filter; ``prev_row`` is None for the first line of an image or pass."""
    if filter_type == FILTER_NONE:
        return bytes(row)

    n = len(row)
    if prev_row is None:
        prev_row = bytes(n)
    out = bytearray(n)

    if filter_type == FILTER_SUB:
        for i in range(n):
            left = out[i - bpp] if i >= bpp else 0
            out[i] = (row[i] + left) & 0xFF
    elif filter_type == FILTER_UP:
        for i in range(n):
            out[i] = (row[i] + prev_row[i]) & 0xFF
    elif filter_type == FILTER_AVERAGE:
        for i in range(n):
            left = out[i - bpp] if i >= bpp else 0
            out[i] = (row[i] + ((left + prev_row[i]) >> 1)) & 0xFF
    elif filter_type == FILTER_PAETH:
        for i in range(n):
            if i >= bpp:
                left = out[i - bpp]
                up_left = prev_row[i - bpp]
            else:
                left = up_left = 0
            out[i] = (row[i] + paeth_predictor(left, prev_row[i], up_left)) & 0xFF
    else:
        raise InvalidData(f'Unknown filter type {filter_type}')
    return bytes(out)


def unpack_samples(row: bytes, bit_depth: int, count: int) -> np.ndarray:
    """Split a defiltered scanline into ``count`` samples, MSB first for depths below 8."""
    raw = np.frombuffer(row, dtype=np.uint8)
    if bit_depth == 16:
        return raw.view('>u2')[:count].astype(np.uint16)
    if bit_depth == 8:
        return raw[:count].astype(np.uint16)

    mask = (1 << bit_depth) - 1
    shifts = np.arange(8 - bit_depth, -1, -bit_depth, dtype=np.uint8)
    samples = (raw[:, None] >> shifts) & mask
    return samples.reshape(-1)[:count].astype(np.uint16)


def passes(header: ImageHeader) -> Iterator[Pass]:
    """Sub-image geometry; a non interlaced image is one pass covering everything."""
    if header.interlace is Interlace.NONE:
        yield Pass(0, 0, 1, 1, header.width, header.height)
        return

    for start_col, start_row, col_step, row_step in ADAM7:
        w = (header.width - start_col + col_step - 1) // col_step if header.width > start_col else 0
        h = (header.height - start_row + row_step - 1) // row_step if header.height > start_row else 0
        yield Pass(start_col, start_row, col_step, row_step, w, h)


def expected_length(header: ImageHeader) -> int:
    total = 0
    for p in passes(header):
        if p.width and p.height:
            total += p.height * (header.bytes_per_scanline(p.width) + 1)
    return total


def reconstruct_pass(raw: bytes, offset: int, header: ImageHeader, width: int, height: int) -> np.ndarray:
    stride = header.bytes_per_scanline(width)
    bpp = header.filter_distance
    count = width * header.channels

    grid = np.empty((height, count), dtype=np.uint16)
    prev = None
    for r in range(height):
        line = raw[offset:offset + stride + 1]
        if len(line) != stride + 1:
            raise InvalidData('invalid scanline length')
        recon = unfilter_row(line[0], line[1:], prev, bpp)
        grid[r] = unpack_samples(recon, header.bit_depth, count)
        prev = recon
        offset += stride + 1
    return grid.reshape(height, width, header.channels)


def reconstruct(raw: bytes, header: ImageHeader) -> np.ndarray:
    """Turn the inflated stream into raw samples of shape (height, width, channels)."""
    if len(raw) != expected_length(header):
        raise InvalidData(f'invalid scanline length: expected {expected_length(header)} bytes '
                          f'of scanlines, got {len(raw)}')

    samples = np.zeros((header.height, header.width, header.channels), dtype=np.uint16)
    offset = 0
    for p in passes(header):
        if not p.width or not p.height:
            continue
        logger.debug('pass at (%d,%d) step (%d,%d): %dx%d', p.start_col, p.start_row,
                     p.col_step, p.row_step, p.width, p.height)
        sub = reconstruct_pass(raw, offset, header, p.width, p.height)
        samples[p.start_row::p.row_step, p.start_col::p.col_step] = sub
        offset += p.height * (header.bytes_per_scanline(p.width) + 1)
    return samples
