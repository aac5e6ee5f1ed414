import logging
from typing import List, Tuple

from pngcore.chunks import PngSignature, RawChunk, matches_signature, read_chunks
from pngcore.decompress_IDAT import decompressIDAT
from pngcore.errors import InvalidData
from pngcore.header import ImageHeader, read_header
from pngcore.pixels import DecodedImage, compose_from_chunks
from pngcore.scanlines import reconstruct
from pngcore.validate import validate_chunks

logger = logging.getLogger(__name__)


def matches_format(data: bytes) -> bool:
    """True when ``data`` holds more than the bare 8 byte PNG signature."""
    return matches_signature(data)


def decode_chunks(chunks: List[RawChunk]) -> Tuple[ImageHeader, DecodedImage]:
    #1 chunk order
    chunks = validate_chunks(chunks)

    #2 IHDR is guaranteed to be first now
    header = read_header(chunks[0])

    #3 IDAT stream -> filtered scanlines -> samples
    raw = decompressIDAT(chunks)
    samples = reconstruct(raw, header)

    #4 samples -> RGBA
    image = compose_from_chunks(samples, header, chunks)
    logger.debug('decoded %dx%d %s image', image.width, image.height, header.color_type.name)
    return header, image


def decode(data: bytes) -> DecodedImage:
    #chunk framing, CRC and chunk types
    chunks = read_chunks(data)
    if chunks is None:
        raise InvalidData('Invalid PNG Signature')
    _, image = decode_chunks(chunks)
    return image


def encode(image: DecodedImage) -> bytes:
    raise NotImplementedError('PNG encoding is not supported')


def decode_file(file_path) -> DecodedImage:
    with open(file_path, 'rb') as f:
        return decode(f.read())


__all__ = ['PngSignature', 'matches_format', 'decode', 'decode_chunks', 'encode', 'decode_file']
