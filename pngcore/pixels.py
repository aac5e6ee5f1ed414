import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.errors import InvalidData
from pngcore.header import ColorType, ImageHeader

logger = logging.getLogger(__name__)

OPAQUE = 0xFFFF


@dataclass(frozen=True, eq=False)
class DecodedImage:
    """Finished image: ``pixels`` is a read-only (height, width, 4) uint16 RGBA array."""

    width: int
    height: int
    pixels: np.ndarray

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def to_rgba8(self) -> np.ndarray:
        return (self.pixels >> 8).astype(np.uint8)

    def __eq__(self, other):
        if not isinstance(other, DecodedImage):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) and np.array_equal(self.pixels, other.pixels)


def scale_to_16(values: np.ndarray, bit_depth: int) -> np.ndarray:
    # v * 65535 / (2^depth - 1), exact for every legal depth
    maxval = (1 << bit_depth) - 1
    return (values.astype(np.uint32) * OPAQUE // maxval).astype(np.uint16)


def parse_palette(chunk: Optional[RawChunk]) -> Optional[np.ndarray]:
    """PLTE payload as an (n, 3) uint8 array."""
    if chunk is None:
        return None
    d = chunk.data
    if len(d) == 0 or len(d) % 3 != 0:
        raise InvalidData(f'PLTE chunk length {len(d)} is not a positive multiple of 3')
    if len(d) // 3 > 256:
        raise InvalidData(f'PLTE chunk has {len(d) // 3} entries, at most 256 allowed')
    return np.frombuffer(d, dtype=np.uint8).reshape(-1, 3)


def parse_transparency(chunk: Optional[RawChunk], header: ImageHeader, palette: Optional[np.ndarray]):
    """tRNS payload: per index alpha bytes for indexed images, raw sample values otherwise."""
    if chunk is None:
        return None
    d = chunk.data
    mask = (1 << header.bit_depth) - 1
    ct = header.color_type

    if ct is ColorType.INDEXED:
        if palette is not None and len(d) > len(palette):
            raise InvalidData(f'tRNS chunk has {len(d)} entries for a palette of {len(palette)}')
        return np.frombuffer(d, dtype=np.uint8)
    if ct is ColorType.GRAYSCALE:
        if len(d) != 2:
            raise InvalidData(f'tRNS chunk for grayscale image must be 2 bytes, got {len(d)}')
        return (int.from_bytes(d, 'big') & mask,)
    if ct is ColorType.TRUECOLOR:
        if len(d) != 6:
            raise InvalidData(f'tRNS chunk for truecolor image must be 6 bytes, got {len(d)}')
        return tuple(int.from_bytes(d[i:i + 2], 'big') & mask for i in range(0, 6, 2))

    logger.debug('ignoring tRNS chunk on %s image', ct.name)
    return None


def _keyed_alpha(samples: np.ndarray, key) -> np.ndarray:
    alpha = np.full(samples.shape[:2], OPAQUE, dtype=np.uint16)
    if key is not None:
        alpha[np.all(samples == np.array(key, dtype=np.uint16), axis=-1)] = 0
    return alpha


def compose(samples: np.ndarray, header: ImageHeader, palette=None, transparency=None) -> DecodedImage:
    """Raw samples (height, width, channels) -> canonical 16-bit RGBA image."""
    ct = header.color_type
    depth = header.bit_depth
    out = np.empty((header.height, header.width, 4), dtype=np.uint16)

    if ct is ColorType.GRAYSCALE:
        gray = scale_to_16(samples[..., 0], depth)
        out[..., 0] = out[..., 1] = out[..., 2] = gray
        out[..., 3] = _keyed_alpha(samples, transparency)
    elif ct is ColorType.GRAYSCALE_ALPHA:
        scaled = scale_to_16(samples, depth)
        out[..., 0] = out[..., 1] = out[..., 2] = scaled[..., 0]
        out[..., 3] = scaled[..., 1]
    elif ct is ColorType.TRUECOLOR:
        out[..., :3] = scale_to_16(samples, depth)
        out[..., 3] = _keyed_alpha(samples, transparency)
    elif ct is ColorType.TRUECOLOR_ALPHA:
        out[...] = scale_to_16(samples, depth)
    elif ct is ColorType.INDEXED:
        if palette is None:
            raise InvalidData('Missing PLTE chunk for indexed image')
        index = samples[..., 0]
        if int(index.max()) >= len(palette):
            raise InvalidData(f'Palette index {int(index.max())} out of range for palette of {len(palette)}')
        alpha = np.full(len(palette), 255, dtype=np.uint8)
        if transparency is not None:
            alpha[:len(transparency)] = transparency
        out[..., :3] = scale_to_16(palette[index], 8)
        out[..., 3] = scale_to_16(alpha[index], 8)

    out.flags.writeable = False
    return DecodedImage(header.width, header.height, out)


def compose_from_chunks(samples: np.ndarray, header: ImageHeader, chunks: Sequence[RawChunk]) -> DecodedImage:
    plte = next((c for c in chunks if c.kind is ChunkKind.PLTE), None)
    trns = next((c for c in chunks if c.kind is ChunkKind.tRNS), None)

    if plte is not None and header.color_type in (ColorType.GRAYSCALE, ColorType.GRAYSCALE_ALPHA):
        raise InvalidData(f'PLTE chunk not allowed for color type {int(header.color_type)}')

    palette = parse_palette(plte) if header.color_type is ColorType.INDEXED else None
    transparency = parse_transparency(trns, header, palette)
    return compose(samples, header, palette, transparency)
