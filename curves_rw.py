"""
Reader for GIMP Curves tool settings.

Two on-disk formats are understood:

  - the "new" LISP-like format GIMP writes from "Export Settings to File"
    (``# GIMP curves tool settings`` followed by ``(curve ...)`` forms,
    optionally wrapped in a ``(GimpCurvesConfig "name" ...)`` preset form);
  - the legacy ``# GIMP Curves File`` format, one line of 17 ``x y`` pairs
    in 0..255 units per channel.

Curves appear in GIMP's channel order: value, red, green, blue, alpha.
The alpha curve means nothing for a display gamma ramp and is dropped.
"""

import enum
import logging
import re

import numpy as np

NEW_FORMAT_HEADER = "# GIMP curves tool settings"
LEGACY_FORMAT_HEADER = "# GIMP Curves File"
PRESET_FORM = "GimpCurvesConfig"

# GIMP writes one curve per histogram channel, in this order
BLOCK_NAMES = ("value", "red", "green", "blue", "alpha")

LEGACY_POINTS = 17

TOKEN_RE = re.compile(r'\(|\)|"(?:[^"\\]|\\.)*"|[^\s()"]+')


class Channel(enum.Enum):
    VALUE = 0
    RED = 1
    GREEN = 2
    BLUE = 3


class MalformedCurveFile(ValueError):
    def __init__(self, message, block=None):
        self.block = block
        if block is not None:
            message = f"{block}: {message}"
        super().__init__(message)


def identity_curve():
    return _freeze(np.array([[0.0, 0.0], [1.0, 1.0]]))


def _freeze(arr):
    arr.flags.writeable = False
    return arr


def _block_label(index):
    name = BLOCK_NAMES[index] if index < len(BLOCK_NAMES) else "?"
    return f"curve {index + 1} ({name})"


def _to_float(token, block):
    try:
        return float(token)
    except (TypeError, ValueError):
        raise MalformedCurveFile(f"unparsable number {token!r}", block) from None


def _to_count(token, block):
    try:
        count = int(token)
    except (TypeError, ValueError):
        raise MalformedCurveFile(f"unparsable count {token!r}", block) from None
    if count < 0:
        raise MalformedCurveFile(f"negative count {count}", block)
    return count


def normalize_points(pairs, block=None):
    """
    排序并去重控制点。
    pairs: 可迭代的 (input, output), 已归一化到 0..1
    重复的 input 保留最后出现的 output; 返回只读 ndarray (n, 2)
    """
    merged = {}
    for x, y in pairs:
        if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
            raise MalformedCurveFile(f"point ({x}, {y}) outside 0..1", block)
        merged[x] = y
    if not merged:
        return identity_curve()
    points = np.array(sorted(merged.items()), dtype=np.float64)
    return _freeze(points)


# ---------------- S-expression reader ----------------

def _strip_comments(text):
    return "\n".join(line for line in text.splitlines() if not line.lstrip().startswith("#"))


def read_forms(text):
    """把 S 表达式解析成嵌套 list, 原子保留为字符串"""
    stack = [[]]
    for token in TOKEN_RE.findall(_strip_comments(text)):
        if token == "(":
            stack.append([])
        elif token == ")":
            if len(stack) == 1:
                raise MalformedCurveFile("unbalanced ')'", "header")
            form = stack.pop()
            stack[-1].append(form)
        elif token.startswith('"'):
            stack[-1].append(token[1:-1])
        else:
            stack[-1].append(token)
    if len(stack) != 1:
        raise MalformedCurveFile("unbalanced '('", "header")
    return stack[0]


def _unwrap_preset(forms):
    if len(forms) == 1 and isinstance(forms[0], list) and forms[0][:1] == [PRESET_FORM]:
        # (GimpCurvesConfig "preset name" (time 0) ...)
        return [f for f in forms[0][1:] if isinstance(f, list)]
    return forms


def _properties(form, block):
    props = {}
    for item in form[1:]:
        if not isinstance(item, list) or not item or isinstance(item[0], list):
            raise MalformedCurveFile(f"unexpected element {item!r}", block)
        props[item[0]] = item[1:]
    return props


def _counted_numbers(props, key, block):
    """读取形如 (points 6 0 0 0.5 0.6 1 1) 的计数列表"""
    values = props.get(key)
    if not values:
        return []
    count = _to_count(values[0], block)
    numbers = values[1:]
    if len(numbers) != count:
        raise MalformedCurveFile(
            f"{key} declares {count} values but {len(numbers)} are present", block
        )
    return [_to_float(v, block) for v in numbers]


def _parse_curve_form(form, index):
    block = _block_label(index)
    props = _properties(form, block)
    curve_type = (props.get("curve-type") or ["smooth"])[0]

    if curve_type == "free":
        samples = _counted_numbers(props, "samples", block)
        if len(samples) < 2:
            raise MalformedCurveFile("free-hand curve needs at least 2 samples", block)
        xs = np.linspace(0.0, 1.0, len(samples))
        return normalize_points(zip(xs.tolist(), samples), block)

    if curve_type != "smooth":
        raise MalformedCurveFile(f"unknown curve-type {curve_type!r}", block)

    coords = _counted_numbers(props, "points", block)
    if len(coords) % 2:
        raise MalformedCurveFile(f"odd number of coordinates ({len(coords)})", block)
    if "n-points" in props and props["n-points"]:
        n_points = _to_count(props["n-points"][0], block)
        if n_points * 2 != len(coords):
            raise MalformedCurveFile(
                f"n-points is {n_points} but {len(coords) // 2} points are present", block
            )
    # samples are GIMP's own rendering, only their count is checked here
    _counted_numbers(props, "samples", block)

    pairs = [(coords[i], coords[i + 1]) for i in range(0, len(coords), 2)]
    # GIMP 2.8 fills unused slots with (-1, -1)
    pairs = [(x, y) for x, y in pairs if x >= 0]
    return normalize_points(pairs, block)


def parse_new_format(text):
    forms = _unwrap_preset(read_forms(text))
    curves = []
    for form in forms:
        if not isinstance(form, list) or not form:
            raise MalformedCurveFile(f"unexpected element {form!r}", "header")
        head = form[0]
        if head == "curve":
            curves.append(form)
        elif form in (["linear", "yes"], ["trc", "linear"]):
            logging.warning("Curve input is saved in linear light. The result might not look correct")
    if len(curves) > len(BLOCK_NAMES):
        raise MalformedCurveFile(
            f"found {len(curves)} curve blocks, at most {len(BLOCK_NAMES)} expected",
            _block_label(len(BLOCK_NAMES)),
        )
    if len(curves) > len(Channel):
        logging.debug("ignoring alpha curve")
    return [_parse_curve_form(form, idx) for idx, form in enumerate(curves[:len(Channel)])]


def parse_legacy_format(text):
    lines = [line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")]
    if len(lines) > len(BLOCK_NAMES):
        raise MalformedCurveFile(
            f"found {len(lines)} curve lines, at most {len(BLOCK_NAMES)} expected",
            _block_label(len(BLOCK_NAMES)),
        )
    result = []
    if len(lines) > len(Channel):
        logging.debug("ignoring alpha curve")
    for idx, line in enumerate(lines[:len(Channel)]):
        block = _block_label(idx)
        tokens = line.split()
        if len(tokens) != LEGACY_POINTS * 2:
            raise MalformedCurveFile(
                f"expected {LEGACY_POINTS * 2} values, got {len(tokens)}", block
            )
        coords = [_to_float(t, block) for t in tokens]
        pairs = [
            (coords[i] / 255.0, coords[i + 1] / 255.0)
            for i in range(0, len(coords), 2)
            if coords[i] >= 0
        ]
        result.append(normalize_points(pairs, block))
    return result


def detect_format(text):
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower().startswith(NEW_FORMAT_HEADER.lower()):
            return "new"
        if stripped.lower().startswith(LEGACY_FORMAT_HEADER.lower()):
            return "legacy"
        if stripped.startswith("#"):
            continue
        if stripped.startswith("(" + PRESET_FORM):
            return "new"
        break
    return None


def parse_curves(text):
    """
    解析 GIMP 曲线文件, 返回 {Channel: ndarray(n, 2)}。
    缺失的通道为恒等曲线, alpha 通道被忽略。
    """
    if not text or not text.strip():
        raise MalformedCurveFile("empty curve file", "header")

    fmt = detect_format(text)
    if fmt == "new":
        blocks = parse_new_format(text)
    elif fmt == "legacy":
        blocks = parse_legacy_format(text)
    else:
        raise MalformedCurveFile("not a GIMP curves file", "header")

    if not blocks:
        raise MalformedCurveFile("no curve blocks found", "header")
    logging.info(f"parsed {len(blocks)} curve(s) from {fmt} format")

    curves = {}
    for channel in Channel:
        if channel.value < len(blocks):
            curves[channel] = blocks[channel.value]
        else:
            curves[channel] = identity_curve()
        logging.debug(f"{channel.name.lower()} curve: {curves[channel].tolist()}")
    return curves
