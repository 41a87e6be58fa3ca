import pytest


def make_bmp(width, height, bit_depth, rows, palette=None, compression=0,
             signature=b'BM', info_header_size=40, colors_used=0,
             data_offset=None, truncate=0):
    """
    Build a BMP file in memory.

    ``rows`` are the raw scanline bytes in file order (bottom row first for a
    positive height), without padding; padding is added here.
    """
    palette = palette or []
    color_table = b''.join(bytes((b, g, r, 0)) for r, g, b in palette)
    if data_offset is None:
        data_offset = 14 + 40 + len(color_table)

    bytes_per_row = (width * bit_depth + 7) // 8
    stride = bytes_per_row + (4 - bytes_per_row % 4) % 4
    pixel_data = b''
    for raw in rows:
        pixel_data += bytes(raw).ljust(stride, b'\x00')

    info = b''.join([
        info_header_size.to_bytes(4, 'little'),
        width.to_bytes(4, 'little', signed=True),
        height.to_bytes(4, 'little', signed=True),
        (1).to_bytes(2, 'little'),
        bit_depth.to_bytes(2, 'little'),
        compression.to_bytes(4, 'little'),
        len(pixel_data).to_bytes(4, 'little'),
        (2835).to_bytes(4, 'little'),
        (2835).to_bytes(4, 'little'),
        colors_used.to_bytes(4, 'little'),
        (0).to_bytes(4, 'little'),
    ])
    body = info + color_table
    body = body.ljust(data_offset - 14, b'\x00')
    file_size = 14 + len(body) + len(pixel_data)
    file_header = (signature + file_size.to_bytes(4, 'little')
                   + (0).to_bytes(4, 'little') + data_offset.to_bytes(4, 'little'))
    data = file_header + body + pixel_data
    if truncate:
        data = data[:-truncate]
    return data


@pytest.fixture
def bmp_bytes():
    return make_bmp


@pytest.fixture
def bmp_file(tmp_path):
    def write(name='image.bmp', **kwargs):
        path = tmp_path / name
        path.write_bytes(make_bmp(**kwargs))
        return path
    return write


@pytest.fixture
def sample_2x2():
    # bottom row: red, green; top row: blue, white (pixels given as B, G, R)
    return dict(
        width=2, height=2, bit_depth=24,
        rows=[
            bytes((0, 0, 255, 0, 255, 0)),
            bytes((255, 0, 0, 255, 255, 255)),
        ],
    )
