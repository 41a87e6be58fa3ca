from errors import IndexOutOfRange


class ImageBuffer:
    """
    Decoded pixels in top-down, left-to-right order.

    Each pixel is an (R, G, B) tuple. The buffer is filled by the decoder
    and handed to the caller only once every pixel has been written.
    """

    def __init__(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer size {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = [(0, 0, 0)] * (width * height)

    def _index(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexOutOfRange(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return y * self.width + x

    def set(self, x, y, rgb):
        self._pixels[self._index(x, y)] = tuple(rgb)

    def get(self, x, y):
        return self._pixels[self._index(x, y)]

    def set_row(self, y, row_pixels):
        # Write one full scanline at output row y
        if len(row_pixels) != self.width:
            raise IndexOutOfRange(
                f"Row of {len(row_pixels)} pixels does not match width {self.width}")
        start = self._index(0, y)
        self._pixels[start:start + self.width] = row_pixels

    def row(self, y):
        start = self._index(0, y)
        return self._pixels[start:start + self.width]

    def rows(self):
        for y in range(self.height):
            yield self.row(y)

    def pixels(self):
        # Flat copy, row-major
        return list(self._pixels)

    @property
    def size(self):
        return self.width, self.height

    def __repr__(self):
        return f"ImageBuffer(width={self.width}, height={self.height})"
