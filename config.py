"""
Constants shared by the decoder, the exporter and the command line.
"""

# Only BITMAPINFOHEADER files with the 'BM' signature are read
BMP_SIGNATURE = b'BM'
FILE_HEADER_SIZE = 14
BITMAPINFOHEADER_SIZE = 40

# Compression method accepted (BI_RGB, no compression)
BI_RGB = 0

SUPPORTED_BIT_DEPTHS = (1, 4, 8, 16, 24)

# Per-channel (red, green, blue) bit widths for direct-colour depths
# that pack several channels into one word. Blue sits in the low bits.
CHANNEL_BITS = {
    16: (5, 6, 5),
}

# Export defaults (overridable from the command line)
MONO_THRESHOLD = 128
BYTES_PER_LINE = 16
WORDS_PER_LINE = 8
