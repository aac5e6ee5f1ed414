"""Byte level PNG building blocks for tests: chunk framing, filters, Adam7 split."""
import struct
import zlib

from pngcore.scanlines import ADAM7, paeth_predictor

PngSignature = b'\x89PNG\r\n\x1a\n'


def chunk(chunk_type: bytes, data: bytes = b'') -> bytes:
    crc = zlib.crc32(data, zlib.crc32(chunk_type))
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)


def ihdr(width, height, bit_depth=8, color_type=0, compression=0, filter_method=0, interlace=0) -> bytes:
    return struct.pack('>IIBBBBB', width, height, bit_depth, color_type, compression, filter_method, interlace)


def png(*chunks: bytes) -> bytes:
    return PngSignature + b''.join(chunks)


def filter_row(filter_type, row, prev_row, bpp):
    if prev_row is None:
        prev_row = bytes(len(row))
    out = bytearray(len(row))
    for i in range(len(row)):
        a = row[i - bpp] if i >= bpp else 0
        b = prev_row[i]
        c = prev_row[i - bpp] if i >= bpp else 0
        if filter_type == 0:
            pred = 0
        elif filter_type == 1:
            pred = a
        elif filter_type == 2:
            pred = b
        elif filter_type == 3:
            pred = (a + b) // 2
        else:
            pred = paeth_predictor(a, b, c)
        out[i] = (row[i] - pred) & 0xFF
    return bytes(out)


def filtered_stream(rows, bpp, filter_types=(0,)):
    """Prefix every row with a filter byte, cycling through ``filter_types``."""
    out = b''
    prev = None
    for i, row in enumerate(rows):
        ft = filter_types[i % len(filter_types)]
        out += bytes([ft]) + filter_row(ft, row, prev, bpp)
        prev = row
    return out


def pack_samples(samples, bit_depth):
    """One scanline worth of samples -> bytes, MSB first for small depths."""
    if bit_depth == 16:
        return b''.join(struct.pack('>H', s) for s in samples)
    if bit_depth == 8:
        return bytes(samples)
    per_byte = 8 // bit_depth
    out = bytearray()
    for i in range(0, len(samples), per_byte):
        group = list(samples[i:i + per_byte]) + [0] * (per_byte - len(samples[i:i + per_byte]))
        byte = 0
        for s in group:
            byte = (byte << bit_depth) | s
        out.append(byte)
    return bytes(out)


def adam7_rows(grid):
    """Split a 2D list of pixels (each a list of samples) into per pass rows."""
    height = len(grid)
    width = len(grid[0])
    passes = []
    for start_col, start_row, col_step, row_step in ADAM7:
        rows = []
        for y in range(start_row, height, row_step):
            rows.append([grid[y][x] for x in range(start_col, width, col_step)])
        if rows and rows[0]:
            passes.append(rows)
    return passes


def image_png(grid, bit_depth=8, color_type=0, interlace=0, filter_types=(0,), extra=(), bpp=None):
    """Encode a 2D list of pixels (each pixel a list of samples) as a complete PNG."""
    height = len(grid)
    width = len(grid[0])
    channels = len(grid[0][0])
    if bpp is None:
        bpp = max(1, channels * bit_depth // 8)

    def encode_rows(rows):
        packed = [pack_samples([s for px in row for s in px], bit_depth) for row in rows]
        return filtered_stream(packed, bpp, filter_types)

    if interlace:
        raw = b''.join(encode_rows(rows) for rows in adam7_rows(grid))
    else:
        raw = encode_rows(grid)

    return png(
        chunk(b'IHDR', ihdr(width, height, bit_depth, color_type, interlace=interlace)),
        *extra,
        chunk(b'IDAT', zlib.compress(raw)),
        chunk(b'IEND'),
    )
