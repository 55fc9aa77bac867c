import logging
import os
import glob
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

_INITIALIZED = False


class SizeTimestampRotatingFileHandler(RotatingFileHandler):
    """Rotate a single log file once it reaches maxBytes.

    - The active log always stays at the configured path (e.g. logs/analysis.log)
    - On rotation the previous file is renamed with a timestamp, e.g.
        logs/analysis_20260124_153012.log
    - backupCount=0 keeps every rotated file; backupCount > 0 keeps the newest N.
    """

    def doRollover(self) -> None:
        if self.stream:
            try:
                self.stream.close()
            finally:
                self.stream = None

        base_path = Path(self.baseFilename)
        log_dir = str(base_path.parent)
        stem = base_path.stem
        suffix = base_path.suffix or ".log"

        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        rotated = os.path.join(log_dir, f"{stem}_{ts}{suffix}")
        i = 1
        while os.path.exists(rotated):
            rotated = os.path.join(log_dir, f"{stem}_{ts}_{i}{suffix}")
            i += 1

        if os.path.exists(self.baseFilename):
            try:
                os.replace(self.baseFilename, rotated)
            except OSError:
                # Keep logging into the current file if the rename is refused.
                pass

        if self.backupCount and self.backupCount > 0:
            pattern = os.path.join(log_dir, f"{stem}_*{suffix}")
            files = sorted(glob.glob(pattern), key=os.path.getmtime, reverse=True)
            for f in files[self.backupCount:]:
                try:
                    os.remove(f)
                except OSError:
                    pass

        if not self.delay:
            self.stream = self._open()


def init_logging(
    log_level: str = "INFO",
    log_file: str = "logs/analysis.log",
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 0,             # 0 = keep all rotated logs
) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    file_handler = SizeTimestampRotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    stream_handler = logging.StreamHandler()

    logging.basicConfig(level=level, format=fmt, handlers=[file_handler, stream_handler])
    _INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"donation_analytics.{name}")
