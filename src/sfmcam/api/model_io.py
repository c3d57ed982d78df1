from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

# Importing the families registers their persisted tags.
import sfmcam.core.pinhole  # noqa: F401
import sfmcam.core.pinhole_radial  # noqa: F401
from sfmcam.core.intrinsic import IntrinsicBase, read_int
from sfmcam.core.registry import IntrinsicArchiveError, intrinsic_class

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "sfmcam.intrinsics.v0"


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise IntrinsicArchiveError(msg)


def intrinsic_to_dict(intrinsic: IntrinsicBase) -> dict[str, Any]:
    """
    Serialize one intrinsic as {"type": tag, width, height, <family fields>}.
    """
    tag = type(intrinsic).type_tag
    # Unregistered subclasses inherit their parent's tag; refuse them so they are
    # not silently reloaded as the parent family.
    _require(bool(tag) and intrinsic_class(tag) is type(intrinsic), f"{type(intrinsic).__name__} is not registered")
    d: dict[str, Any] = {"type": tag}
    intrinsic.save(d)
    return d


def intrinsic_from_dict(d: Mapping[str, Any]) -> IntrinsicBase:
    """
    Rebuild an intrinsic from `intrinsic_to_dict` output.

    Raises UnknownIntrinsicTypeError for tags no family registered.
    """
    _require(isinstance(d, Mapping), "intrinsic entry must be an object")
    tag = d.get("type")
    _require(isinstance(tag, str), "intrinsic entry needs a string 'type'")
    return intrinsic_class(str(tag)).load(d)


def intrinsics_to_json(intrinsics: Mapping[int, IntrinsicBase]) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "intrinsics": [{"key": int(k), "value": intrinsic_to_dict(v)} for k, v in sorted(intrinsics.items())],
    }


def intrinsics_from_json(data: Mapping[str, Any]) -> dict[int, IntrinsicBase]:
    _require(data.get("schema_version") == SCHEMA_VERSION, f"schema_version must be {SCHEMA_VERSION}")
    entries = data.get("intrinsics")
    _require(isinstance(entries, list), "intrinsics must be a list")

    out: dict[int, IntrinsicBase] = {}
    for entry in entries:
        _require(isinstance(entry, Mapping) and "key" in entry and "value" in entry, "entries need 'key' and 'value'")
        key = read_int(entry, "key")
        _require(key not in out, f"duplicate intrinsic key {key}")
        out[key] = intrinsic_from_dict(entry["value"])
    return out


def save_intrinsics(path: Path, intrinsics: Mapping[int, IntrinsicBase]) -> Path:
    """
    Save an id -> intrinsic collection (mixed camera families) into a JSON file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = intrinsics_to_json(intrinsics)
    path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
    logger.debug("wrote %d intrinsics to %s", len(intrinsics), path)
    return path


def load_intrinsics(path: Path) -> dict[int, IntrinsicBase]:
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    _require(isinstance(data, Mapping), f"{path} must contain a JSON object")
    out = intrinsics_from_json(data)
    logger.debug("loaded %d intrinsics from %s", len(out), path)
    return out
