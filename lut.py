import numpy as np
from meta_data import DEFAULT_LUT_LEN, LUT_MAX

IDENTITY_POINTS = np.array([[0.0, 0.0], [1.0, 1.0]])


def evaluate_curve(points, x):
    """
    在控制点之间分段线性插值。
    points: 形状 (n, 2) 的控制点, 输入严格递增
    x: 标量或 ndarray (0..1)
    控制点范围之外取首/尾点的输出 (不外推); 单点曲线为常数; 无点曲线为恒等。
    """
    x = np.asarray(x, dtype=np.float64)
    points = np.asarray(points, dtype=np.float64)
    if points.size == 0:
        return x
    # np.interp clamps to fp[0] / fp[-1] outside xp
    return np.interp(x, points[:, 0], points[:, 1])


def effective_curve(value_points, channel_points, x):
    """先经过 Value 曲线, 再经过通道自身曲线"""
    return evaluate_curve(channel_points, evaluate_curve(value_points, x))


def sample_positions(target_len=DEFAULT_LUT_LEN):
    if target_len < 2:
        raise ValueError("lut length must be >= 2")
    return np.linspace(0.0, 1.0, target_len)


def resample(points, target_len=DEFAULT_LUT_LEN):
    return evaluate_curve(points, sample_positions(target_len))


def quantize(values, max_value=LUT_MAX):
    """0..1 浮点 -> 0..max_value 整数, 四舍五入并钳位"""
    v = np.rint(np.asarray(values, dtype=np.float64) * max_value)
    return np.clip(v, 0, max_value).astype(np.uint16)


def srgb_to_linear(code):
    """
    sRGB 逆OETF：sRGB code(0..1) -> Linear(0..1)
    """
    v = np.clip(np.asarray(code, dtype=np.float64), 0.0, 1.0)
    a = 0.055
    thresh = 0.04045
    return np.where(v <= thresh, v / 12.92, np.power((v + a) / (1 + a), 2.4))
