"""gimp2icc: turn a GIMP Curves tool settings file into an ICC profile with a
'vcgt' gamma ramp, so the curve is applied by the graphics adapter even when
the desktop is not colour-managed.
"""

import argparse
import logging
import sys

from curves_rw import MalformedCurveFile
from log import init_logging
from meta_data import *
from meta_data import __version__
from profile_builder import build_profile


default_values = {
    "debug": 0,
    "icc_output": "out.icc",
    "description": DEFAULT_DESCRIPTION,
    "copyright": DEFAULT_COPYRIGHT,
    "lut_size": DEFAULT_LUT_LEN,
    "trc": "curves",
    "log_file": None,
}


class IoFailure(OSError):
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def read_curve_file(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise IoFailure(path, f"not a text file ({e.reason})") from e
    except OSError as e:
        raise IoFailure(path, e.strerror or str(e)) from e


def write_profile(path, data):
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise IoFailure(path, e.strerror or str(e)) from e


def get_options(argv):
    parser = argparse.ArgumentParser(prog="gimp2icc", description=__doc__)
    parser.add_argument("curves_input", help="GIMP curves settings file")
    parser.add_argument(
        "icc_output",
        nargs="?",
        default=default_values["icc_output"],
        help="output ICC profile [default: %(default)s]",
    )
    parser.add_argument(
        "-d",
        "--description",
        default=default_values["description"],
        help="name that will appear in Windows' colour management menu",
    )
    parser.add_argument(
        "--copyright",
        default=default_values["copyright"],
        help="copyright text [default: %(default)s]",
    )
    parser.add_argument(
        "--lut-size",
        dest="lut_size",
        type=int,
        default=default_values["lut_size"],
        help="entries per channel in the TRC and vcgt tables [default: %(default)s]",
    )
    parser.add_argument(
        "--trc",
        choices=TRC_MODES,
        default=default_values["trc"],
        help="'curves' stores the ramp in the TRC tags too, 'srgb' keeps a plain "
        "sRGB response there [default: %(default)s]",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        dest="debug",
        default=default_values["debug"],
        help="Increase verbosity (use multiple times for more)",
    )
    parser.add_argument(
        "--quiet",
        action="store_const",
        dest="debug",
        const=-1,
        help="Only report errors",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=default_values["log_file"],
        metavar="PATH",
        help="also write a debug log to PATH",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    options = get_options(sys.argv[1:] if argv is None else argv)
    init_logging(options.debug, options.log_file)
    logging.debug(options)

    try:
        logging.info(f"reading curve samples from {options.curves_input}...")
        text = read_curve_file(options.curves_input)
        data = build_profile(
            text,
            options.description,
            copyright=options.copyright,
            lut_size=options.lut_size,
            trc=options.trc,
        )
        logging.info(f"saving profile to {options.icc_output}...")
        write_profile(options.icc_output, data)
    except IoFailure as e:
        logging.error(str(e))
        return 1
    except MalformedCurveFile as e:
        logging.error(f"{options.curves_input}: {e}")
        return 2
    except ValueError as e:
        logging.error(str(e))
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
