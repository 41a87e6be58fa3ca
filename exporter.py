"""
Serialise a decoded ImageBuffer as a C header for firmware builds.

Two layouts are produced:
    mono    1 bit per pixel, MSB first, each row padded to a whole byte,
            a bit is set when the pixel is darker than the threshold
    rgb565  one uint16_t per pixel, red in the high bits
"""

import logging
import re
from pathlib import Path

from config import BYTES_PER_LINE, MONO_THRESHOLD, WORDS_PER_LINE

logger = logging.getLogger('bmpconv.exporter')

FORMATS = ('mono', 'rgb565')


def luminance(rgb):
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) // 1000


def to_mono_bits(buffer, threshold=MONO_THRESHOLD):
    bytes_per_row = (buffer.width + 7) // 8
    data = bytearray(bytes_per_row * buffer.height)

    for y, row in enumerate(buffer.rows()):
        for x, rgb in enumerate(row):
            # pixel is "on" if darker than threshold
            if luminance(rgb) < threshold:
                i = y * bytes_per_row + (x // 8)
                data[i] |= 1 << (7 - (x % 8))  # MSB-first
    return bytes(data)


def to_rgb565(buffer):
    vals = []
    for r, g, b in buffer.pixels():
        vals.append(((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3))
    return vals


def c_identifier(name):
    ident = re.sub(r'\W', '_', name)
    if not ident or ident[0].isdigit():
        ident = '_' + ident
    return ident


def render_c_header(buffer, name, fmt='mono', threshold=MONO_THRESHOLD, source_name=None):
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format {fmt!r}, expected one of {FORMATS}")

    name = c_identifier(name)
    w, h = buffer.size
    lines = ["#pragma once", "#include <stdint.h>", ""]
    if source_name:
        lines.append(f"// Auto-generated from {source_name}")

    if fmt == 'mono':
        data = to_mono_bits(buffer, threshold)
        lines.append(f"// Size: {w}x{h}, 1bpp, MSB-first, row-major")
        lines.append("")
        lines.append(f"#define {name.upper()}_W {w}")
        lines.append(f"#define {name.upper()}_H {h}")
        lines.append("")
        lines.append(f"static const uint8_t {name}[{len(data)}] = {{")
        # Hex dump, BYTES_PER_LINE bytes per line
        for i in range(0, len(data), BYTES_PER_LINE):
            chunk = data[i:i + BYTES_PER_LINE]
            lines.append("  " + ", ".join(f"0x{b:02X}" for b in chunk) + ",")
    else:
        vals = to_rgb565(buffer)
        lines.append(f"// Size: {w}x{h}, RGB565, row-major")
        lines.append("")
        lines.append(f"#define {name.upper()}_W {w}")
        lines.append(f"#define {name.upper()}_H {h}")
        lines.append("")
        lines.append(f"static const uint16_t {name}[{len(vals)}] = {{")
        for i in range(0, len(vals), WORDS_PER_LINE):
            chunk = vals[i:i + WORDS_PER_LINE]
            lines.append("  " + ", ".join(f"0x{v:04X}" for v in chunk) + ",")

    lines.append("};")
    return "\n".join(lines) + "\n"


def write_c_header(path, buffer, name=None, fmt='mono', threshold=MONO_THRESHOLD, source_name=None):
    path = Path(path)
    if name is None:
        name = path.stem
    # Render first so a failure never leaves a half-written file
    text = render_c_header(buffer, name, fmt, threshold, source_name)
    path.write_text(text, encoding='utf-8')
    logger.info(f"Wrote {path} ({fmt}, {buffer.width}x{buffer.height})")
    return path
