import struct

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.header import ColorType


#pretty printer for one chunk returned by chunks.read_chunks()
def describe_chunk(chunk: RawChunk) -> str:
    kind = chunk.kind
    lines = [f"{kind.code} length: {chunk.length}, offset: {chunk.offset}"]
    d = chunk.data

    if kind is ChunkKind.IHDR and len(d) == 13:
        w, h, bitd, colort, compm, filterm, interlacem = struct.unpack('>IIBBBBB', d)
        lines.append(f"  width={w}, height={h}, bit_depth={bitd}, color_type={colort}, "
                     f"compression={compm}, filter={filterm}, interlace={interlacem}")

    elif kind is ChunkKind.PLTE:
        #list of 3 byte RGB entries
        lines.append(f"  {len(d) // 3} colors")

    elif kind is ChunkKind.tRNS:
        lines.append(f"  {len(d)} bytes of transparency data")

    elif kind in (ChunkKind.IDAT, ChunkKind.IEND):
        pass

    else:
        #ancillary chunks are not interpreted
        lines.append(f"  opaque ancillary chunk, {chunk.length} bytes")

    return "\n".join(lines)


def printChunk(chunk: RawChunk):
    print(describe_chunk(chunk))


def printChunks(chunks):
    for chunk in chunks:
        printChunk(chunk)


def color_type_name(code: int) -> str:
    try:
        return ColorType(code).name.lower().replace('_', ' ')
    except ValueError:
        return f"unknown ({code})"
