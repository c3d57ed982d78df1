from sfmcam.core.camera_types import EIntrinsic, is_pinhole, is_valid_type
from sfmcam.core.pinhole import PinholeIntrinsic
from sfmcam.core.pinhole_radial import PinholeBrownT2


def test_pinhole_family_bounds():
    for t in (
        EIntrinsic.PINHOLE_CAMERA,
        EIntrinsic.PINHOLE_CAMERA_RADIAL1,
        EIntrinsic.PINHOLE_CAMERA_RADIAL3,
        EIntrinsic.PINHOLE_CAMERA_BROWN,
    ):
        assert is_pinhole(t)
        assert is_valid_type(t)
    assert not is_pinhole(EIntrinsic.PINHOLE_CAMERA_START)
    assert not is_valid_type(EIntrinsic.PINHOLE_CAMERA_END)


def test_instance_validity_uses_type_and_size():
    assert PinholeIntrinsic(640, 480, 500.0, 320.0, 240.0).is_valid()
    assert PinholeBrownT2(640, 480, 500.0, 320.0, 240.0).is_valid()
    assert not PinholeIntrinsic(0, 480, 500.0, 320.0, 240.0).is_valid()
    assert not PinholeIntrinsic(640, 480, 0.0, 320.0, 240.0).is_valid()
