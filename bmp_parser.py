"""
Decoder for uncompressed Windows BMP files (BITMAPINFOHEADER only).

The pipeline reads the 14 byte file header and the 40 byte info header,
loads the colour table for palette-indexed depths, then walks the
scanlines as stored in the file and writes each decoded row into an
ImageBuffer in top-down order.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass

from config import (
    BI_RGB,
    BITMAPINFOHEADER_SIZE,
    BMP_SIGNATURE,
    CHANNEL_BITS,
    FILE_HEADER_SIZE,
    SUPPORTED_BIT_DEPTHS,
)
from errors import (
    BMPIOError,
    FormatError,
    PaletteIndexOutOfRange,
    UnsupportedFormat,
)
from image_buffer import ImageBuffer

logger = logging.getLogger('bmpconv.parser')

RowGeometry = namedtuple(
    'RowGeometry', ['bytes_per_pixel', 'bytes_per_row', 'padding', 'row_stride'])

DecodedBitmap = namedtuple('DecodedBitmap', ['header', 'palette', 'image'])


@dataclass(frozen=True)
class BMPHeader:
    # File header
    signature: int
    file_size: int
    reserved: int
    data_offset: int
    # Info header
    info_header_size: int
    width: int
    height: int
    color_planes: int
    bit_depth: int
    compression: int
    raw_bitmap_size: int
    x_pels_per_meter: int
    y_pels_per_meter: int
    colors_used: int
    important_colors: int

    @property
    def row_count(self):
        return abs(self.height)

    @property
    def bottom_up(self):
        # Positive height: first stored scanline is the bottom of the image
        return self.height > 0

    @property
    def palette_length(self):
        if self.bit_depth > 8:
            return 0
        return self.colors_used or (1 << self.bit_depth)

    def as_metadata(self):
        return {
            'signature': self.signature.to_bytes(2, 'little').decode('latin-1'),
            'file_size': self.file_size,
            'data_offset': self.data_offset,
            'info_header_size': self.info_header_size,
            'width': self.width,
            'height': self.height,
            'bpp': self.bit_depth,
            'compression': self.compression,
            'raw_bitmap_size': self.raw_bitmap_size,
            'colors_used': self.colors_used,
            'important_colors': self.important_colors,
        }


def _le(b, start, end, signed=False):
    return int.from_bytes(b[start:end], 'little', signed=signed)


def _seek(source, offset, what):
    try:
        source.seek(offset)
    except (OSError, ValueError) as e:
        raise BMPIOError(f"Error seeking to {what} at offset {offset}: {e}") from e


def _source_size(source):
    try:
        pos = source.tell()
        size = source.seek(0, 2)
        source.seek(pos)
    except (OSError, ValueError) as e:
        raise BMPIOError(f"Error finding file size: {e}") from e
    return size


def _read(source, size, what):
    try:
        return source.read(size)
    except OSError as e:
        raise BMPIOError(f"Error reading {what}: {e}") from e


def _read_exact(source, size, what):
    data = _read(source, size, what)
    if len(data) != size:
        raise BMPIOError(
            f"Short read on {what}: expected {size} bytes, got {len(data)}")
    return data


def read_header(source):
    """
    Parse and validate the file header and the info header.

    Leaves the read cursor at byte 54. Raises FormatError for a bad
    signature or header layout and UnsupportedFormat for compressed files
    or bit depths outside 1/4/8/16/24.
    """
    file_header = _read_exact(source, FILE_HEADER_SIZE, "file header")

    # Signature (must start with 'BM')
    if file_header[0:2] != BMP_SIGNATURE:
        raise FormatError(f"Not a BMP file, signature {bytes(file_header[0:2])!r}")

    info_header = _read_exact(source, BITMAPINFOHEADER_SIZE, "info header")
    b = file_header + info_header

    header = BMPHeader(
        signature=_le(b, 0, 2),
        file_size=_le(b, 2, 6),
        reserved=_le(b, 6, 10),
        data_offset=_le(b, 10, 14),
        info_header_size=_le(b, 14, 18),
        width=_le(b, 18, 22, signed=True),
        height=_le(b, 22, 26, signed=True),
        color_planes=_le(b, 26, 28),
        bit_depth=_le(b, 28, 30),
        compression=_le(b, 30, 34),
        raw_bitmap_size=_le(b, 34, 38),
        x_pels_per_meter=_le(b, 38, 42, signed=True),
        y_pels_per_meter=_le(b, 42, 46, signed=True),
        colors_used=_le(b, 46, 50),
        important_colors=_le(b, 50, 54),
    )

    if header.info_header_size != BITMAPINFOHEADER_SIZE:
        raise FormatError(
            f"Info header size {header.info_header_size} is not supported, "
            f"only BITMAPINFOHEADER ({BITMAPINFOHEADER_SIZE})")
    if header.compression != BI_RGB:
        raise UnsupportedFormat(
            f"Compression [{header.compression}] is not implemented")
    if header.bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedFormat(f"Unsupported bpp: {header.bit_depth}")
    if header.width <= 0:
        raise FormatError(f"Invalid width: {header.width}")
    if header.height == 0:
        raise FormatError("Invalid height: 0")
    if header.data_offset < FILE_HEADER_SIZE + header.info_header_size:
        raise FormatError(
            f"Data offset {header.data_offset} points inside the headers")

    return header


def load_palette(source, header):
    """Read the colour table as a list of (R, G, B); empty above 8 bpp."""
    if header.bit_depth > 8:
        return []

    num_colors = header.palette_length
    start = FILE_HEADER_SIZE + header.info_header_size
    end = start + num_colors * 4
    if end > header.data_offset:
        raise FormatError(
            f"Color table of {num_colors} entries ends at {end}, "
            f"past the data offset {header.data_offset}")

    _seek(source, start, "color table")
    raw = _read_exact(source, num_colors * 4, "color table")

    color_table = []
    for i in range(0, len(raw), 4):
        b, g, r, _ = raw[i:i + 4]
        color_table.append((r, g, b))  # Store as (R, G, B)
    return color_table


def row_geometry(width, bit_depth):
    bytes_per_pixel = bit_depth / 8
    # ceil(width * bytes_per_pixel) without going through floats
    bytes_per_row = (width * bit_depth + 7) // 8
    # Each row is padded to a multiple of 4 bytes
    padding = (4 - bytes_per_row % 4) % 4
    return RowGeometry(bytes_per_pixel, bytes_per_row, padding, bytes_per_row + padding)


def unpack_row(raw, width, bit_depth):
    """
    Split one scanline into ``width`` raw samples.

    1 and 4 bpp give palette indices packed MSB first; unused low bits in
    the last byte are dropped. 8 bpp gives one index per byte. 16 and 24
    bpp give the little-endian byte group of each pixel.
    """
    if bit_depth in (1, 4):
        mask = (1 << bit_depth) - 1
        samples = []
        for col in range(width):
            bit_pos = col * bit_depth
            byte = raw[bit_pos // 8]
            shift = 8 - bit_depth - (bit_pos % 8)
            samples.append((byte >> shift) & mask)
        return samples

    if bit_depth == 8:
        return list(raw[:width])

    if bit_depth in (16, 24):
        n = bit_depth // 8
        return [bytes(raw[col * n:col * n + n]) for col in range(width)]

    raise UnsupportedFormat(f"Unsupported bpp: {bit_depth}")


def _scale_to_8bit(value, bits):
    top = (1 << bits) - 1
    return (value * 255 + top // 2) // top


def expand(header, palette, raw_sample, channel_bits=CHANNEL_BITS):
    """Turn one raw sample into an (R, G, B) tuple."""
    bpp = header.bit_depth

    if bpp <= 8:
        if raw_sample >= len(palette):
            raise PaletteIndexOutOfRange(
                f"Palette index {raw_sample} out of range for "
                f"{len(palette)} entries")
        return palette[raw_sample]

    if bpp == 24:
        B, G, R = raw_sample
        return (R, G, B)

    if bpp in channel_bits:
        red_bits, green_bits, blue_bits = channel_bits[bpp]
        value = int.from_bytes(raw_sample, 'little')
        blue = value & ((1 << blue_bits) - 1)
        green = (value >> blue_bits) & ((1 << green_bits) - 1)
        red = (value >> (blue_bits + green_bits)) & ((1 << red_bits) - 1)
        return (_scale_to_8bit(red, red_bits),
                _scale_to_8bit(green, green_bits),
                _scale_to_8bit(blue, blue_bits))

    raise UnsupportedFormat(f"No pixel expansion for bpp: {bpp}")


def decode_rows(source, header, palette, channel_bits=CHANNEL_BITS):
    """
    Decode every scanline into a new ImageBuffer.

    File row r lands on output row height-1-r for bottom-up files, so the
    returned buffer is always top-down. A short read means the file is
    truncated and raises UnsupportedFormat.
    """
    geometry = row_geometry(header.width, header.bit_depth)
    height = header.row_count

    # Check the pixel data is all there before allocating the buffer
    needed = header.data_offset + geometry.row_stride * height
    available = _source_size(source)
    if needed > available:
        raise UnsupportedFormat(
            f"Truncated pixel data: {header.width}x{height} at {header.bit_depth} bpp "
            f"needs {needed} bytes, file has {available}")

    image = ImageBuffer(header.width, height)

    for file_row in range(height):
        row_start = header.data_offset + file_row * geometry.row_stride
        _seek(source, row_start, f"row {file_row}")
        raw = _read(source, geometry.row_stride, f"row {file_row}")
        if len(raw) < geometry.row_stride:
            raise UnsupportedFormat(
                f"Truncated pixel data: row {file_row} at offset {row_start} "
                f"needs {geometry.row_stride} bytes, got {len(raw)}")

        samples = unpack_row(raw, header.width, header.bit_depth)
        row_pixels = [expand(header, palette, s, channel_bits) for s in samples]

        # Choose output row depending on bottom-up or top-down storage
        out_row = height - 1 - file_row if header.bottom_up else file_row
        image.set_row(out_row, row_pixels)

    return image


def log_header(header, geometry, palette):
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for k, v in header.as_metadata().items():
        logger.debug(f"{k:<18}: {v}")
    logger.debug(f"{'bytes per pixel':<18}: {geometry.bytes_per_pixel}")
    logger.debug(f"{'bytes per row':<18}: {geometry.bytes_per_row}")
    logger.debug(f"{'row padding':<18}: {geometry.padding}")
    logger.debug(f"{'row stride':<18}: {geometry.row_stride}")
    for i, (r, g, b) in enumerate(palette):
        logger.debug(f"palette {i:<3}: R:[{r}], G:[{g}], B:[{b}]")


def decode_file(filepath, channel_bits=CHANNEL_BITS):
    """
    Decode a BMP file from disk.

    Returns a DecodedBitmap(header, palette, image). The file is closed on
    every exit path; on failure no image is returned.
    """
    try:
        f = open(filepath, "rb")
    except OSError as e:
        raise BMPIOError(f"File {filepath} could not be opened: {e}") from e

    with f:
        header = read_header(f)
        palette = load_palette(f, header)
        log_header(header, row_geometry(header.width, header.bit_depth), palette)
        image = decode_rows(f, header, palette, channel_bits)

    logger.info(
        f"Decoded {filepath}: {image.width}x{image.height}, "
        f"{header.bit_depth} bpp, {len(palette)} palette entries")
    return DecodedBitmap(header, palette, image)


class BMPParser:
    def __init__(self, filepath):
        self.filepath = filepath
        self.header = None
        self.metadata = {}      # Store header information (width, height, etc.)
        self.color_table = []   # Store palette (for indexed BMPs)
        self.image = None       # Decoded ImageBuffer, top-down

    def load(self):
        header, palette, image = decode_file(self.filepath)
        # Only publish results once the whole file decoded
        self.header = header
        self.color_table = palette
        self.image = image
        self.metadata = header.as_metadata()
        geometry = row_geometry(header.width, header.bit_depth)
        self.metadata['row_stride'] = geometry.row_stride
        self.metadata['row_padding'] = geometry.padding
        return image

    @property
    def pixel_data(self):
        # Rows of (R, G, B), top row first
        if self.image is None:
            return []
        return list(self.image.rows())
