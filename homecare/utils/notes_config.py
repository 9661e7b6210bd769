"""Service rate configuration stored inside ``Service.notes``.

The services table has no column for rate settings, so the editor appends a
single line to the free-text notes::

    Weekend coverage only.

    [CONFIG] {"serviceType": "HCSS", "levelType": "RATIO", "level": "1:1", ...}
"""

import json
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

CONFIG_PREFIX = "[CONFIG]"

LEVEL_TYPES = ("RATIO", "ZONE")


def parse_notes_config(notes: Optional[str]) -> Tuple[Optional[Any], str]:
    """Split notes into (config, free notes).

    Only the first ``[CONFIG]`` line is read. It is removed from the free
    notes even when its JSON is broken, in which case config is ``None``.
    """
    text = (notes or "").replace("\r\n", "\n")
    lines = text.split("\n")

    cfg_idx = next(
        (i for i, line in enumerate(lines) if line.strip().startswith(CONFIG_PREFIX)),
        None,
    )
    if cfg_idx is None:
        return None, text.strip()

    json_part = lines[cfg_idx].strip()[len(CONFIG_PREFIX):].strip()
    try:
        config = json.loads(json_part)
    except ValueError:
        logger.warning("Ignoring unreadable [CONFIG] line in service notes")
        config = None

    free = "\n".join(line for i, line in enumerate(lines) if i != cfg_idx).strip()
    return config, free


def build_config_line(config: Any) -> str:
    return f"{CONFIG_PREFIX} {json.dumps(config, separators=(',', ':'))}"


def merge_notes_with_config(notes_free: Optional[str], config: Any) -> str:
    clean = (notes_free or "").replace("\r\n", "\n").strip()
    line = build_config_line(config)
    if not clean:
        return line
    return f"{clean}\n\n{line}"


def build_rate_config(
    level_type: str,
    service_type: str = "",
    level: str = "",
    format: Optional[str] = None,
    rate: Optional[float] = None,
    rate_per_mile: Optional[float] = None,
) -> dict:
    """Config dict for a RATIO or ZONE service; raises ValueError when incomplete."""
    level_type = (level_type or "").strip().upper()
    if level_type not in LEVEL_TYPES:
        raise ValueError("Invalid level type.")

    missing = []
    if not (level or "").strip():
        missing.append("level")

    if level_type == "RATIO":
        if not (format or "").strip():
            missing.append("format")
        if rate is None or rate < 0:
            missing.append("rate")
        if missing:
            raise ValueError("Missing/invalid fields: " + ", ".join(missing))
        return {
            "serviceType": service_type or "",
            "levelType": "RATIO",
            "level": level.strip(),
            "format": format.strip(),
            "rate": float(rate),
        }

    if rate_per_mile is None or rate_per_mile < 0:
        missing.append("ratePerMile")
    if missing:
        raise ValueError("Missing/invalid fields: " + ", ".join(missing))
    # zones are always billed per mile
    return {
        "serviceType": service_type or "",
        "levelType": "ZONE",
        "level": level.strip(),
        "format": "MILEAGE",
        "ratePerMile": float(rate_per_mile),
    }
