import enum
import logging
import struct
from dataclasses import dataclass

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.errors import InvalidData, InvalidImageDimensions

logger = logging.getLogger(__name__)


class ColorType(enum.IntEnum):
    GRAYSCALE = 0
    TRUECOLOR = 2
    INDEXED = 3
    GRAYSCALE_ALPHA = 4
    TRUECOLOR_ALPHA = 6

    @property
    def channels(self) -> int:
        return CHANNELS[self]


class Interlace(enum.IntEnum):
    NONE = 0
    ADAM7 = 1


CHANNELS = {
    ColorType.GRAYSCALE: 1,
    ColorType.TRUECOLOR: 3,
    ColorType.INDEXED: 1,
    ColorType.GRAYSCALE_ALPHA: 2,
    ColorType.TRUECOLOR_ALPHA: 4,
}

BIT_DEPTHS = (1, 2, 4, 8, 16)

#allowed bit depths per color type
ALLOWED_BIT_DEPTHS = {
    ColorType.GRAYSCALE: (1, 2, 4, 8, 16),
    ColorType.TRUECOLOR: (8, 16),
    ColorType.INDEXED: (1, 2, 4, 8),
    ColorType.GRAYSCALE_ALPHA: (8, 16),
    ColorType.TRUECOLOR_ALPHA: (8, 16),
}

COMPRESSION_DEFLATE = 0
FILTER_ADAPTIVE = 0


@dataclass(frozen=True)
class ImageHeader:
    width: int
    height: int
    bit_depth: int
    color_type: ColorType
    compression_method: int = COMPRESSION_DEFLATE
    filter_method: int = FILTER_ADAPTIVE
    interlace: Interlace = Interlace.NONE

    @property
    def channels(self) -> int:
        return self.color_type.channels

    @property
    def bits_per_pixel(self) -> int:
        return self.channels * self.bit_depth

    @property
    def filter_distance(self) -> int:
        # bytes back to the same byte of the previous pixel, at least 1
        return max(1, (self.bits_per_pixel + 7) // 8)

    def bytes_per_scanline(self, width=None) -> int:
        if width is None:
            width = self.width
        return (width * self.bits_per_pixel + 7) // 8


def parse_ihdr(data: bytes) -> ImageHeader:
    if len(data) != 13:
        raise InvalidData(f'IHDR chunk must be 13 bytes, got {len(data)}')
    width, height, bit_depth, color_code, compression, filter_method, interlace = struct.unpack('>IIBBBBB', data)

    #1 dimensions
    if width == 0 or height == 0:
        raise InvalidImageDimensions(f'Width or height is 0 ({width}x{height})')

    #2 bit depth on its own
    if bit_depth not in BIT_DEPTHS:
        raise InvalidData(f'Invalid bit depth {bit_depth}')

    #3 color type and its bit depth combination
    try:
        color_type = ColorType(color_code)
    except ValueError:
        raise InvalidData(f'Invalid color type {color_code} (bit depth {bit_depth})') from None
    if bit_depth not in ALLOWED_BIT_DEPTHS[color_type]:
        raise InvalidData(f'Invalid bit depth {bit_depth} for color type {color_code}')

    #4 method fields, only one value defined for compression and filtering
    if compression != COMPRESSION_DEFLATE:
        raise InvalidData(f'Invalid compression method {compression}')
    if filter_method != FILTER_ADAPTIVE:
        raise InvalidData(f'Invalid filter method {filter_method}')
    try:
        interlace_method = Interlace(interlace)
    except ValueError:
        raise InvalidData(f'Invalid interlace method {interlace}') from None

    header = ImageHeader(width, height, bit_depth, color_type, compression, filter_method, interlace_method)
    logger.debug('IHDR width=%d height=%d bit_depth=%d color_type=%s interlace=%s',
                 width, height, bit_depth, color_type.name, interlace_method.name)
    return header


def read_header(chunk: RawChunk) -> ImageHeader:
    if chunk.kind is not ChunkKind.IHDR:
        raise InvalidData(f'Expected IHDR chunk, found {chunk.kind.code}')
    return parse_ihdr(chunk.data)
