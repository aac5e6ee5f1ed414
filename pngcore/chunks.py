import enum
import logging
import struct
import zlib
from dataclasses import dataclass
from typing import List, Optional

from pngcore.errors import InvalidData

logger = logging.getLogger(__name__)

#8 byte PNG signature
PngSignature: bytes = b'\x89PNG\r\n\x1a\n'


class ChunkKind(enum.Enum):
    """Every chunk type the decoder accepts, keyed by its 4 byte code."""

    IHDR = b'IHDR'
    PLTE = b'PLTE'
    IDAT = b'IDAT'
    IEND = b'IEND'
    tRNS = b'tRNS'
    cHRM = b'cHRM'
    iCCP = b'iCCP'
    gAMA = b'gAMA'
    sRGB = b'sRGB'
    sBIT = b'sBIT'
    tEXt = b'tEXt'
    zTXt = b'zTXt'
    iTXt = b'iTXt'
    bKGD = b'bKGD'
    hIST = b'hIST'
    pHYs = b'pHYs'
    sPLT = b'sPLT'
    tIME = b'tIME'

    @property
    def code(self) -> str:
        return self.value.decode('ascii')


@dataclass(frozen=True)
class RawChunk:
    length: int
    kind: ChunkKind
    data: bytes
    crc: int
    offset: int


def matches_signature(data: bytes) -> bool:
    return len(data) > len(PngSignature) and data[:len(PngSignature)] == PngSignature


def read_chunk(data: bytes, offset: int) -> RawChunk:
    #chunk = [4B length][4B type][payload][4B CRC]
    if len(data) - offset < 8:
        raise InvalidData(f'Truncated chunk header at offset {offset}')
    length, code = struct.unpack_from('>I4s', data, offset)
    end = offset + 12 + length
    if end > len(data):
        raise InvalidData(f'Chunk at offset {offset} declares {length} bytes, past the end of data')

    try:
        kind = ChunkKind(code)
    except ValueError:
        raise InvalidData(f'Invalid PNG chunk type: {code!r} (0x{code.hex()})') from None

    payload = bytes(data[offset + 8:offset + 8 + length])
    crc, = struct.unpack_from('>I', data, offset + 8 + length)

    # CRC covers type + payload
    calc_crc = zlib.crc32(payload, zlib.crc32(code))
    if crc != calc_crc:
        raise InvalidData(f'{kind.code} chunk checksum failed: stored 0x{crc:08x}, computed 0x{calc_crc:08x}')
    return RawChunk(length, kind, payload, crc, offset)


def read_chunks(data: bytes) -> Optional[List[RawChunk]]:
    """Split a PNG byte buffer into chunks, in file order.

    Returns None when the buffer does not start with the PNG signature so the
    caller can try another format.
    """
    if data[:len(PngSignature)] != PngSignature:
        return None

    chunks = []
    offset = len(PngSignature)
    while offset < len(data):
        chunk = read_chunk(data, offset)
        chunks.append(chunk)
        offset += 12 + chunk.length

    logger.debug('read %d chunks from %d bytes', len(chunks), len(data))
    return chunks
