__version__ = "0.1.0"

# GIMP saves every curve with 256 samples, the ramp uses the same resolution
DEFAULT_LUT_LEN = 256
LUT_MAX = 65535

DEFAULT_DESCRIPTION = "Custom gamma ICC profile"
DEFAULT_COPYRIGHT = "No copyright, use freely"

# ICC header
ICC_HEADER_SIZE = 128
ICC_VERSION = (2, 1, 0)
ICC_DEVICE_CLASS = b"mntr"
ICC_COLOR_SPACE = b"RGB "
ICC_PCS = b"XYZ "
ICC_FILE_SIGNATURE = b"acsp"
ICC_PLATFORM = b"MSFT"
ICC_CMM_TYPE = b"\x00\x00\x00\x00"
ICC_CREATOR = b"\x00\x00\x00\x00"
ICC_RENDERING_INTENT = 0  # perceptual

# CIE xy
D65_xy = (0.3127, 0.3290)
SRGB_PRIMARIES_xy = {
    "red": (0.64, 0.33),
    "green": (0.30, 0.60),
    "blue": (0.15, 0.06),
    "white": D65_xy,
}

# XYZ (Y=1)
D50_XYZ = (0.9642, 1.0, 0.8249)
D65_XYZ = (0.9505, 1.0, 1.0891)

TRC_MODES = ("curves", "srgb")
