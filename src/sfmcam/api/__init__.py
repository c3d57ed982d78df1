from sfmcam.api.model_io import (
    intrinsic_from_dict,
    intrinsic_to_dict,
    load_intrinsics,
    save_intrinsics,
)

__all__ = [
    "intrinsic_from_dict",
    "intrinsic_to_dict",
    "load_intrinsics",
    "save_intrinsics",
]
