import os
import datetime as dt
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sortfiles import DEFAULT_FORMAT, LOCAL_TIMEZONE

# Sample instant used to check that a pattern renders a usable folder name.
_SAMPLE_INSTANT = dt.datetime(2022, 7, 15, 13, 45, 30, tzinfo=dt.timezone.utc)


class ConfigurationError(ValueError):
    """Invalid option detected before any file is touched."""


@dataclass(frozen=True)
class SortConfig:
    source: str
    target: str
    recursive: bool = False
    move: bool = False
    timezone: Optional[dt.tzinfo] = None  # None -> system local zone
    pattern: str = DEFAULT_FORMAT
    include_hidden: bool = True
    dry_run: bool = False

    def localize(self, instant: dt.datetime) -> dt.datetime:
        if self.timezone is None:
            return instant.astimezone()
        return instant.astimezone(self.timezone)

    def group_key(self, instant: dt.datetime) -> str:
        """Folder name for an aware instant, rendered in the configured zone."""
        return self.localize(instant).strftime(self.pattern)


# ------------------------------------------------------------
# validation
# ------------------------------------------------------------

def resolve_timezone(name: Optional[str]) -> Optional[dt.tzinfo]:
    if not name or name == LOCAL_TIMEZONE:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"unknown timezone: {name!r}") from e


def validate_pattern(pattern: str) -> str:
    """
    Make sure 'pattern' renders a single, non-empty path component.
    Returns the sample rendering.
    """
    if not pattern:
        raise ConfigurationError("formatter pattern is empty")
    try:
        sample = _SAMPLE_INSTANT.strftime(pattern)
    except ValueError as e:
        raise ConfigurationError(f"invalid formatter pattern {pattern!r}: {e}") from e
    if not sample.strip():
        raise ConfigurationError(f"formatter pattern {pattern!r} renders an empty name")
    if sample in (".", ".."):
        raise ConfigurationError(f"formatter pattern {pattern!r} renders {sample!r}")
    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in sample for sep in separators) or "\0" in sample:
        raise ConfigurationError(
            f"formatter pattern {pattern!r} renders a path separator ({sample!r})"
        )
    return sample


def _require_dir(path: str, label: str) -> str:
    if not os.path.exists(path):
        raise ConfigurationError(f"{label} folder does not exist: {path}")
    if not os.path.isdir(path):
        raise ConfigurationError(f"{label} is not a folder: {path}")
    return os.path.abspath(path)


def build_config(
    source: Optional[str] = None,
    target: Optional[str] = None,
    *,
    recursive: bool = False,
    move: bool = False,
    timezone: Optional[str] = None,
    pattern: Optional[str] = None,
    include_hidden: bool = True,
    dry_run: bool = False,
) -> SortConfig:
    """
    Validate raw options and build the immutable run configuration.
    Source defaults to the working directory and target to the source.
    Raises ConfigurationError before any I/O other than existence checks.
    """
    source = _require_dir(source or os.getcwd(), "source")
    target = _require_dir(target, "target") if target else source
    pattern = pattern or DEFAULT_FORMAT
    validate_pattern(pattern)

    return SortConfig(
        source=source,
        target=target,
        recursive=recursive,
        move=move,
        timezone=resolve_timezone(timezone),
        pattern=pattern,
        include_hidden=include_hidden,
        dry_run=dry_run,
    )
