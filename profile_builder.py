"""
Curve-to-profile conversion: GIMP curves text -> ICC profile bytes.

The profile carries the resampled curves twice: as the rTRC/gTRC/bTRC tone
curves and as the 'vcgt' gamma ramp that Windows and macOS load straight into
the graphics adapter.
"""

import logging

from curves_rw import Channel, parse_curves, identity_curve
from icc_rw import ICCProfile
from lut import effective_curve, quantize, sample_positions, srgb_to_linear
from matrix import colorant_XYZ
from meta_data import *


def build_rgb_luts(curves, target_len=DEFAULT_LUT_LEN):
    """
    把 Value 曲线与各颜色通道曲线复合后重采样。
    curves: {Channel: ndarray(n, 2)}, 缺失的通道按恒等处理
    返回 {"red": uint16[N], "green": uint16[N], "blue": uint16[N]}
    """
    x = sample_positions(target_len)
    value = curves.get(Channel.VALUE, identity_curve())
    luts = {}
    for channel in (Channel.RED, Channel.GREEN, Channel.BLUE):
        own = curves.get(channel, identity_curve())
        luts[channel.name.lower()] = quantize(effective_curve(value, own, x))
    return luts


def srgb_trc(target_len=DEFAULT_LUT_LEN):
    table = quantize(srgb_to_linear(sample_positions(target_len)))
    return {"red": table, "green": table, "blue": table}


def build_profile_from_curves(curves, description=DEFAULT_DESCRIPTION,
                              copyright=DEFAULT_COPYRIGHT, created=None,
                              lut_size=DEFAULT_LUT_LEN, trc="curves"):
    if trc not in TRC_MODES:
        raise ValueError(f"trc must be one of {TRC_MODES}, got {trc!r}")
    if not 2 <= int(lut_size) <= 0xFFFF:
        raise ValueError(f"lut_size must be between 2 and 65535, got {lut_size}")
    lut_size = int(lut_size)

    ramps = build_rgb_luts(curves, lut_size)
    colorants = colorant_XYZ()

    icc = ICCProfile(created=created)
    icc.write_all(
        desc=description,
        cprt=copyright,
        wtpt=[D65_XYZ],
        rXYZ=[colorants["red"]],
        gXYZ=[colorants["green"]],
        bXYZ=[colorants["blue"]],
        rgbTRC=ramps if trc == "curves" else srgb_trc(lut_size),
        vcgt=ramps,
    )
    data = icc.rebuild()
    for tag, offset, size in icc.tag_table:
        logging.debug(f"tag {tag} offset={offset} size={size}")
    logging.info(f"built profile '{description}': {len(data)} bytes, {len(icc.tag_table)} tags")
    return data


def build_profile(curve_text, description=DEFAULT_DESCRIPTION, **options):
    """
    curve_text: GIMP 曲线文件的文本内容
    description: Windows 颜色管理中显示的名称
    options: copyright / created / lut_size / trc, 见 build_profile_from_curves
    出错时抛出 curves_rw.MalformedCurveFile; 本函数不做任何文件读写
    """
    curves = parse_curves(curve_text)
    return build_profile_from_curves(curves, description, **options)
