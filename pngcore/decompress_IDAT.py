import logging
import zlib
from typing import Iterable

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.errors import InvalidData

logger = logging.getLogger(__name__)


def decompressIDAT(chunks: Iterable[RawChunk]) -> bytes:
    #IDAT payloads in file order form one zlib stream
    IDAT_data = b''.join(c.data for c in chunks if c.kind is ChunkKind.IDAT)
    return inflate(IDAT_data)


def inflate(compressed: bytes) -> bytes:
    d = zlib.decompressobj()
    try:
        raw = d.decompress(compressed)
        raw += d.flush()
    except zlib.error as exc:
        raise InvalidData(f'Invalid compressed image data: {exc}') from exc

    # decompress() does not raise on a stream that just stops early
    if not d.eof:
        raise InvalidData('Invalid compressed image data: incomplete or truncated stream')
    if d.unused_data:
        raise InvalidData('Invalid compressed image data: trailing bytes after end of stream')

    logger.debug('inflated %d bytes to %d bytes', len(compressed), len(raw))
    return raw
