import argparse
import logging
import os
import sys

from pngcore.chunks import read_chunks
from pngcore.errors import DecodeError
from pngcore.PNG import decode_chunks, matches_format
from pngcore.print_chunks import color_type_name, printChunks
from pngcore.viewer import show_image


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='pngcore', description='Decode a PNG file into RGBA pixels.')
    parser.add_argument('file', help='path to the PNG file')
    parser.add_argument('--chunks', action='store_true', help='list the chunks of the file')
    parser.add_argument('--show', action='store_true', help='display the decoded image')
    parser.add_argument('--verbose', '-v', action='store_true', help='debug logging')
    return parser.parse_args(argv)


def setup_logging(verbose: bool):
    level = os.environ.get('PNGCORE_LOG_LEVEL') or ('DEBUG' if verbose else 'INFO')
    logging.basicConfig(level=level.upper(), format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        with open(args.file, 'rb') as f:
            data = f.read()
    except OSError as e:
        print(f"Cannot read file: {e}", file=sys.stderr)
        return 2

    if not matches_format(data):
        print(f"Not a PNG file: {args.file}", file=sys.stderr)
        return 2

    try:
        chunks = read_chunks(data)
        if args.chunks:
            printChunks(chunks)
        header, image = decode_chunks(chunks)
    except DecodeError as e:
        print(f"Error decoding image data: {e}", file=sys.stderr)
        return 1

    print(f"Decoded {image.width}x{image.height} image "
          f"({color_type_name(header.color_type)}, {header.bit_depth}-bit)")

    if args.show:
        show_image(image, title=os.path.basename(args.file))
    return 0


if __name__ == '__main__':
    sys.exit(main())
