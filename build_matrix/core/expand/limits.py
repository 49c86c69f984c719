from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml


# Both caps are compared with a strict ">" against counts, so the effective
# ceilings are LIMIT_TAGS + 1 variables per axis and LIMIT_AXIS + 1 axes.
LIMIT_TAGS = 10
LIMIT_AXIS = 25


@dataclass(frozen=True)
class ExpandLimits:
    limit_tags: int = LIMIT_TAGS
    limit_axis: int = LIMIT_AXIS

    @property
    def max_tags(self) -> int:
        return self.limit_tags + 1

    @property
    def max_axis(self) -> int:
        return self.limit_axis + 1


DEFAULT_LIMITS = ExpandLimits()

LIMIT_KEYS = ("limit_tags", "limit_axis")


class LimitsConfigError(ValueError):
    pass


def load_limits_file(path: str | Path) -> dict[str, int]:
    """Load cap overrides from a YAML file.

    Format:
      limit_tags: 10
      limit_axis: 25

    Both keys are optional. Returns only the keys present in the file.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise LimitsConfigError("limits file must be a mapping of limit name -> int")

    out: dict[str, int] = {}
    for k, v in raw.items():
        if k not in LIMIT_KEYS:
            raise LimitsConfigError(
                f"unknown limit: {k} (choose from: {', '.join(LIMIT_KEYS)})"
            )
        out[k] = _check_limit(k, v)
    return out


def merged_limits(overrides: dict[str, Any] | None = None) -> ExpandLimits:
    """Return DEFAULT_LIMITS with optional overrides applied.

    None values in overrides are ignored so CLI options can be passed straight through.
    """
    limits = DEFAULT_LIMITS
    if overrides:
        present = {k: _check_limit(k, v) for k, v in overrides.items() if v is not None}
        limits = replace(limits, **present)
    return limits


def load_and_merge(
    limits_file: str | None, overrides: dict[str, Any] | None = None
) -> ExpandLimits:
    combined: dict[str, Any] = {}
    if limits_file:
        combined.update(load_limits_file(limits_file))
    if overrides:
        combined.update({k: v for k, v in overrides.items() if v is not None})
    return merged_limits(combined)


def _check_limit(name: str, value: Any) -> int:
    if name not in LIMIT_KEYS:
        raise LimitsConfigError(f"unknown limit: {name}")
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise LimitsConfigError(f"limit '{name}' must be a non-negative integer")
    return value
