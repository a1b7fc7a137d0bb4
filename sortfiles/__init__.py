from .__version__ import __version__

import os
import datetime
import logging
from collections import defaultdict
from datetime import timedelta
from typing import Optional

from colorama import Fore, Style, just_fix_windows_console





# ========================================
# logs with color
# ========================================
class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA
    }

    def format(self, record):
        if not hasattr(record, 'target'):
            record.target = '-'  # Default value if 'target' is not provided
        log_color = self.COLORS.get(record.levelname, '')
        log_format = (
            f"{log_color}[%(levelname)s]\t%(target)s:\t%(message)s{Style.RESET_ALL}"
        )
        formatter = logging.Formatter(log_format)
        return formatter.format(record)


def configure_logging(verbose: bool = False) -> None:
    """Install the colored handler on the root logger (DEBUG when verbose)."""
    just_fix_windows_console()
    handler = logging.StreamHandler()
    handler.setFormatter(ColoredFormatter())
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, handlers=[handler], force=True)




# ========================================
# definitions
# ========================================
DEFAULT_FORMAT = "%Y-%m"
LOCAL_TIMEZONE = "local"
MOVE_ARROW = "->"
COPY_ARROW = "=>"
FAIL_ARROW = "!!"





# ========================================
# file enumeration
# ========================================
def is_hidden(path: str) -> bool:
    """True if the last path component is a dotfile."""
    return os.path.basename(os.path.normpath(path)).startswith(".")


def iter_files(root: str, *, recursive: bool = False, include_hidden: bool = True, errors: Optional[list] = None):
    """
    Yield regular files under 'root' in sorted order.
    Shallow by default (direct children only); recursive walks every subfolder.
    Hidden folders are not descended into when include_hidden is False.
    Folders that cannot be listed are logged and, if given, appended to 'errors'
    as the raised OSError.
    """
    def _on_error(e):
        logging.error("Could not list folder: %s", e, extra={'target': os.path.basename(e.filename or root)})
        if errors is not None:
            errors.append(e)

    if not recursive:
        try:
            names = sorted(os.listdir(root))
        except OSError as e:
            if e.filename is None:
                e.filename = root
            _on_error(e)
            return
        for name in names:
            path = os.path.join(root, name)
            if not include_hidden and is_hidden(path):
                continue
            if os.path.isfile(path):
                yield path
        return

    for curr, dirs, files in os.walk(root, onerror=_on_error):
        if not include_hidden:
            dirs[:] = [d for d in dirs if not d.startswith(".")]
        dirs.sort()
        for name in sorted(files):
            if not include_hidden and name.startswith("."):
                continue
            path = os.path.join(curr, name)
            if os.path.isfile(path):
                yield path





# ========================================
# summary helpers (end-of-run reporting)
# ========================================
def format_duration(seconds: float) -> str:
    """Return HH:MM:SS for a duration in seconds."""
    if seconds is None:
        return "00:00:00"
    total_seconds = int(timedelta(seconds=int(round(seconds))).total_seconds())
    h = total_seconds // 3600
    m = (total_seconds % 3600) // 60
    s = total_seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


class RunSummary:
    """
    Lightweight tracker for end-of-run summaries.

    Usage:
        s = RunSummary()
        s.inc('copied')
        # ... do your work ...
        s.emit_lines([
            f"Copied {s['copied']} files in {s.duration_hms}.",
        ], json_extra={'copied': s['copied']})
    """
    def __init__(self):
        self._t0 = datetime.datetime.now()
        self._t1 = None
        self.counters = defaultdict(int)   # any numeric counters
        self.metrics = {}                  # arbitrary other values

    # timing
    @property
    def duration_s(self) -> float:
        end = self._t1 or datetime.datetime.now()
        return (end - self._t0).total_seconds()

    @property
    def duration_hms(self) -> str:
        return format_duration(self.duration_s)

    def stop(self):
        self._t1 = datetime.datetime.now()

    # counters & metrics
    def inc(self, key: str, n: int = 1):
        self.counters[key] += n

    def set(self, key: str, value):
        self.metrics[key] = value

    def get(self, key: str, default=None):
        if key in self.counters:
            return self.counters[key]
        return self.metrics.get(key, default)

    def __getitem__(self, key: str):
        return self.get(key)

    # emission
    def emit_lines(self, lines, level=logging.INFO, json_extra=None):
        """Log one or more human lines, then a compact payload at DEBUG."""
        self.stop()
        for line in lines:
            logging.log(level, line, extra={'target': 'SUMMARY'})
        payload = {
            'duration_s': int(round(self.duration_s)),
            'counters': dict(self.counters),
            'metrics': self.metrics,
        }
        if json_extra:
            payload.update(json_extra)
        logging.debug("%s", payload, extra={'target': 'SUMMARY'})
