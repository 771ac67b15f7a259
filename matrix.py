import numpy as np
from meta_data import D50_XYZ, SRGB_PRIMARIES_xy

BRADFORD = np.array([
    [0.8951, 0.2664, -0.1614],
    [-0.7502, 1.7135, 0.0367],
    [0.0389, -0.0685, 1.0296],
])


def xy_to_XYZ(xy, Y=1.0):
    x, y = xy
    if y <= 0:
        raise ValueError(f"invalid chromaticity: {xy}")
    return np.array([x * Y / y, Y, (1.0 - x - y) * Y / y])


def build_rgb_to_xyz_from_primaries(xy_R, xy_G, xy_B, xy_W):
    """
    用色域定义（原色 xy 与白点 xy）构造 RGB(linear) -> XYZ 矩阵, 白点 Y=1
    """
    M0 = np.column_stack([xy_to_XYZ(xy_R), xy_to_XYZ(xy_G), xy_to_XYZ(xy_B)])
    s = np.linalg.solve(M0, xy_to_XYZ(xy_W))  # 列缩放使 M@[1,1,1]=XW
    return M0 @ np.diag(s)


def bradford_adaptation(src_white, dst_white):
    """Von Kries style chromatic adaptation matrix in the Bradford cone space."""
    src_lms = BRADFORD @ np.asarray(src_white, dtype=float)
    dst_lms = BRADFORD @ np.asarray(dst_white, dtype=float)
    return np.linalg.inv(BRADFORD) @ np.diag(dst_lms / src_lms) @ BRADFORD


def colorant_XYZ(primaries=SRGB_PRIMARIES_xy, pcs_white=D50_XYZ):
    """
    计算 rXYZ/gXYZ/bXYZ 标签内容: 原色的 XYZ, 已从显示白点适配到 PCS 白点 (D50)
    返回 {"red": [X, Y, Z], "green": [...], "blue": [...]}
    """
    M = build_rgb_to_xyz_from_primaries(
        primaries["red"], primaries["green"], primaries["blue"], primaries["white"]
    )
    adapted = bradford_adaptation(xy_to_XYZ(primaries["white"]), pcs_white) @ M
    return {
        "red": adapted[:, 0].tolist(),
        "green": adapted[:, 1].tolist(),
        "blue": adapted[:, 2].tolist(),
    }
