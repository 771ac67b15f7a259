import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"


def verbosity_to_level(debug):
    """-1: 只显示错误, 0: 警告, 1: 信息, >=2: 调试"""
    if debug < 0:
        return logging.ERROR
    if debug == 0:
        return logging.WARNING
    if debug == 1:
        return logging.INFO
    return logging.DEBUG


def init_logging(debug=0, log_path=None, stream=None):
    fmt = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    root_logger = logging.getLogger()
    # repeated calls (tests, embedding) replace the handlers installed here
    for handler in list(root_logger.handlers):
        if getattr(handler, "_gimp2icc", False):
            root_logger.removeHandler(handler)
            handler.close()

    sh = logging.StreamHandler(stream or sys.stderr)
    sh.setFormatter(fmt)
    sh.setLevel(verbosity_to_level(debug))
    sh._gimp2icc = True
    root_logger.addHandler(sh)

    if log_path:
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(logging.DEBUG)
        fh._gimp2icc = True
        root_logger.addHandler(fh)

    root_logger.setLevel(logging.DEBUG if log_path else verbosity_to_level(debug))
    return root_logger
