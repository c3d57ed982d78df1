from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import numpy as np

from sfmcam.api.model_io import intrinsic_to_dict, load_intrinsics
from sfmcam.core.camera_types import is_pinhole


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="sfmcam")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    desc = sub.add_parser("describe", help="Print one JSON line per intrinsic stored in an archive.")
    desc.add_argument("archive", type=Path)

    bear = sub.add_parser("bearing", help="Print the unit bearing vector of a pixel for one intrinsic.")
    bear.add_argument("archive", type=Path)
    bear.add_argument("--key", type=int, required=True, help="Intrinsic id inside the archive.")
    bear.add_argument("--pixel", type=float, nargs=2, required=True, metavar=("U", "V"))

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "describe":
        for key, intr in load_intrinsics(args.archive).items():
            entry = {
                "key": key,
                "intrinsic": intrinsic_to_dict(intr),
                "params": intr.get_params(),
                "have_distortion": intr.have_distortion(),
                "valid": intr.is_valid(),
                "pinhole": is_pinhole(intr.get_type()),
            }
            print(json.dumps(entry, sort_keys=True))
        return 0

    if args.cmd == "bearing":
        intrinsics = load_intrinsics(args.archive)
        if args.key not in intrinsics:
            parser.error(f"no intrinsic with key {args.key} in {args.archive}")
        d = intrinsics[args.key].bearing_vector(np.asarray(args.pixel, dtype=np.float64))
        print(json.dumps([float(v) for v in d.tolist()]))
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
