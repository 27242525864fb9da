import pytest

from vcucore.interfaces import RecordingCan
from vcucore.params import ParamStore
from vcucore.tesla_charger import TeslaCharger


@pytest.fixture
def setup():
    params = ParamStore()
    can = RecordingCan()
    charger = TeslaCharger(params)
    charger.set_can_interface(can)
    return params, can, charger


def test_registers_request_id(setup):
    _, can, _ = setup
    assert can.registered == [0x108]


def test_hv_request_follows_frames(setup):
    _, _, charger = setup
    assert charger.control_charge(True, True) is False
    charger.decode_can(0x108, b"\xaa")
    assert charger.control_charge(False, True) is True
    charger.decode_can(0x108, b"\x11")
    assert charger.control_charge(False, True) is True
    charger.decode_can(0x107, b"\xcc")
    assert charger.control_charge(False, True) is True
    charger.decode_can(0x108, b"\xcc")
    assert charger.control_charge(False, True) is False


def test_frame_contents(setup):
    params, can, charger = setup
    params["udc"] = 400
    params["BMS_ChargeLim"] = 10
    params["opmode"] = 4
    charger.task_100ms()
    ((can_id, frame),) = can.sent
    assert can_id == 0x109
    assert len(frame) == 8
    assert frame[0] == 4
    assert int.from_bytes(frame[1:3], "little") == 400
    assert int.from_bytes(frame[3:5], "little") == 395
    assert int.from_bytes(frame[5:7], "little") == 1500
    assert frame[7] >> 4 == 0xC


def test_power_limited_by_bms(setup):
    params, can, charger = setup
    params["udc"] = 400
    params["BMS_ChargeLim"] = 0
    charger.task_100ms()
    frame = can.sent[-1][1]
    assert int.from_bytes(frame[5:7], "little") == 0


def test_enable_flag_follows_ac_request(setup):
    _, can, charger = setup
    charger.control_charge(False, True)
    charger.task_100ms()
    assert can.sent[-1][1][7] >> 4 == 0xA
    charger.control_charge(True, False)
    charger.task_100ms()
    assert can.sent[-1][1][7] >> 4 == 0xC


def test_counter_wraps_at_fifteen(setup):
    _, can, charger = setup
    for _ in range(16):
        charger.task_100ms()
    counters = [frame[7] & 0x0F for _, frame in can.sent]
    assert counters == list(range(15)) + [0]


def test_task_without_can_raises():
    charger = TeslaCharger(ParamStore())
    with pytest.raises(RuntimeError):
        charger.task_100ms()