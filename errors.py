class BMPError(Exception):
    """Base class for every decoding failure."""


class BMPIOError(BMPError, OSError):
    # open / seek / read failure, or a short read of the headers or palette
    pass


class FormatError(BMPError, ValueError):
    # structurally invalid file: bad signature, header size, overlapping areas
    pass


class UnsupportedFormat(BMPError, ValueError):
    # valid file using a feature we don't decode (compression, bit depth, truncation)
    pass


class PaletteIndexOutOfRange(BMPError, IndexError):
    pass


class IndexOutOfRange(BMPError, IndexError):
    pass
