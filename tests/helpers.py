import struct

import numpy as np

IDENTITY = [(0.0, 0.0), (1.0, 1.0)]


def _fmt(v):
    return repr(float(v))


def curve_block(points=IDENTITY, curve_type="smooth", samples=None, raw_points=None):
    """One GIMP 2.10 style (curve ...) form."""
    if samples is None:
        xs = np.linspace(0.0, 1.0, 256)
        if points:
            p = sorted(points)
            samples = np.interp(xs, [a for a, _ in p], [b for _, b in p])
        else:
            samples = xs
    if raw_points is None:
        coords = " ".join(f"{_fmt(x)} {_fmt(y)}" for x, y in points)
        raw_points = f"(n-points {len(points)})\n    (points {len(points) * 2} {coords})"
    types = " ".join(["smooth"] * len(points))
    return (
        "(curve\n"
        f"    (curve-type {curve_type})\n"
        f"    {raw_points}\n"
        f"    (point-types {len(points)} {types})\n"
        f"    (n-samples {len(samples)})\n"
        f"    (samples {len(samples)} {' '.join(_fmt(s) for s in samples)}))"
    )


def curves_text(*blocks, linear=False):
    """Full settings file; each block is a point list or a curve_block() string."""
    body = [b if isinstance(b, str) else curve_block(b) for b in blocks]
    return (
        "# GIMP curves tool settings\n\n"
        "(time 0)\n"
        f"(linear {'yes' if linear else 'no'})\n"
        "(channel value)\n"
        + "\n".join(body)
        + "\n\n# end of curves tool settings\n"
    )


def legacy_text(*channels):
    """Old '# GIMP Curves File': 17 (x, y) slots per line in 0..255, -1 = unused."""
    lines = ["# GIMP Curves File"]
    for points in channels:
        slots = list(points) + [(-1, -1)] * (17 - len(points))
        lines.append(" ".join(f"{x} {y}" for x, y in slots))
    return "\n".join(lines) + "\n"


def read_tag_table(data):
    count = struct.unpack(">I", data[128:132])[0]
    entries = []
    for i in range(count):
        pos = 132 + i * 12
        sig = data[pos:pos + 4].decode("ascii")
        offset, size = struct.unpack(">II", data[pos + 4:pos + 12])
        entries.append((sig, offset, size))
    return entries


def tag_data(data, sig):
    for name, offset, size in read_tag_table(data):
        if name == sig:
            return data[offset:offset + size]
    raise KeyError(sig)


def read_curv(block):
    assert block[0:4] == b"curv"
    count = struct.unpack(">I", block[8:12])[0]
    return np.frombuffer(block[12:12 + count * 2], dtype=">u2").astype(int)


def read_vcgt(block):
    assert block[0:4] == b"vcgt"
    gamma_type, channels, count, entry_size = struct.unpack(">IHHH", block[8:18])
    assert (gamma_type, channels, entry_size) == (0, 3, 2)
    values = np.frombuffer(block[18:18 + 3 * count * 2], dtype=">u2").astype(int)
    return values[:count], values[count:2 * count], values[2 * count:]
