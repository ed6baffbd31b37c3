import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".udiff_writer/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"write_{timestamp}.log")

    logger = logging.getLogger("udiff_writer")
    logger.setLevel(logging.DEBUG)

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


# Package logger; handlers are attached by setup_logger() at CLI start
log = logging.getLogger("udiff_writer")


def print_findings(path: str, findings) -> None:
    """Print omission findings as an indented list."""
    print(f"  Possible omissions in {path}:")
    for f in findings:
        print(f"    line {f.line_number:>4}  [{f.keyword}]  {f.line.strip()}")
