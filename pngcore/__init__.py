from pngcore.errors import DecodeError, InvalidData, InvalidImageDimensions
from pngcore.pixels import DecodedImage
from pngcore.PNG import decode, decode_file, encode, matches_format

__all__ = [
    'DecodeError',
    'InvalidData',
    'InvalidImageDimensions',
    'DecodedImage',
    'decode',
    'decode_file',
    'encode',
    'matches_format',
]
