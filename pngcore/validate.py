import enum
import logging
from typing import List, NamedTuple, Sequence

from pngcore.chunks import ChunkKind, RawChunk
from pngcore.errors import InvalidData, InvalidImageDimensions

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    EXPECT_HEADER = 'expect-header'
    BODY = 'body'
    CLOSED = 'closed'


class ChunkOrder(NamedTuple):
    """Position in the chunk ordering state machine.

    ``EXPECT_HEADER -> BODY(saw_idat, idat_closed) -> CLOSED``; every illegal
    transition raises instead of producing a new state.
    """

    phase: Phase = Phase.EXPECT_HEADER
    saw_idat: bool = False
    idat_closed: bool = False
    saw_plte: bool = False
    saw_trns: bool = False


def step(state: ChunkOrder, chunk: RawChunk, is_last: bool) -> ChunkOrder:
    kind = chunk.kind

    if state.phase is Phase.CLOSED:
        raise InvalidData('IEND must be the last chunk')

    if kind is ChunkKind.IHDR:
        if state.phase is Phase.EXPECT_HEADER:
            return state._replace(phase=Phase.BODY)
        raise InvalidData('Multiple IHDR chunks')

    if state.phase is Phase.EXPECT_HEADER:
        raise InvalidData(f'Missing IHDR: IHDR must be the first chunk, found {kind.code}')

    if kind is ChunkKind.IDAT:
        if state.idat_closed:
            raise InvalidImageDimensions('Non-contiguous image data: IDAT after end of IDAT block')
        return state._replace(saw_idat=True)

    #any other chunk closes a started IDAT run
    state = state._replace(idat_closed=state.saw_idat)

    if kind is ChunkKind.IEND:
        if not is_last:
            raise InvalidData('IEND must be the last chunk')
        return state._replace(phase=Phase.CLOSED)

    if kind is ChunkKind.PLTE:
        if state.saw_plte:
            raise InvalidData('Multiple PLTE chunks')
        if state.saw_idat:
            raise InvalidData('PLTE chunk after image data')
        if state.saw_trns:
            raise InvalidData('PLTE chunk after tRNS')
        return state._replace(saw_plte=True)

    if kind is ChunkKind.tRNS:
        if state.saw_idat:
            raise InvalidData('tRNS chunk after image data')
        return state._replace(saw_trns=True)

    return state


def validate_chunks(chunks: Sequence[RawChunk]) -> List[RawChunk]:
    """Check chunk ordering; returns the same chunks when they are well formed."""
    if not chunks:
        raise InvalidData('No chunks in PNG stream')

    state = ChunkOrder()
    last = len(chunks) - 1
    for i, chunk in enumerate(chunks):
        state = step(state, chunk, i == last)

    if not state.saw_idat:
        raise InvalidData('Missing image data: no IDAT chunk')
    if state.phase is not Phase.CLOSED:
        raise InvalidData('Missing end marker: no IEND chunk')

    logger.debug('chunk order ok (%d chunks)', len(chunks))
    return list(chunks)
