from sfmcam.api import intrinsic_from_dict, intrinsic_to_dict, load_intrinsics, save_intrinsics
from sfmcam.core.camera_types import EIntrinsic, IntrinsicParameterType
from sfmcam.core.geometry import Pose3
from sfmcam.core.intrinsic import IntrinsicBase
from sfmcam.core.pinhole import PinholeIntrinsic
from sfmcam.core.pinhole_radial import PinholeBrownT2, PinholeRadialK1, PinholeRadialK3
from sfmcam.core.registry import IntrinsicArchiveError, UnknownIntrinsicTypeError

__all__ = [
    "EIntrinsic",
    "IntrinsicParameterType",
    "IntrinsicBase",
    "PinholeIntrinsic",
    "PinholeRadialK1",
    "PinholeRadialK3",
    "PinholeBrownT2",
    "Pose3",
    "IntrinsicArchiveError",
    "UnknownIntrinsicTypeError",
    "intrinsic_from_dict",
    "intrinsic_to_dict",
    "load_intrinsics",
    "save_intrinsics",
]
