import pytest

from vcucore.interfaces import RecordingCan
from vcucore.vag_sbox import VwContactorBox, vw_crc


def _status_frame(amperes, voltage, voltage2):
    raw = amperes & 0xFFF
    data = bytearray(8)
    data[1] = (raw & 0xF) << 4
    data[2] = raw >> 4
    data[3] = voltage2 & 0xFF
    data[4] = ((voltage & 0xF) << 4) | (voltage2 >> 8)
    data[5] = voltage >> 4
    return bytes(data)


def _control_frames(can):
    return [data for can_id, data in can.sent if can_id == 0x0BA]


def test_register():
    can = RecordingCan()
    VwContactorBox().register_can_messages(can)
    assert can.registered == [0x0BB]


@pytest.mark.parametrize("amps", [0, 5, -5, 2047, -2048])
def test_decode_round_trip(amps):
    box = VwContactorBox()
    box.decode_can(0x0BB, _status_frame(amps, 0x17C, 0x123))
    assert box.amperes == amps
    assert box.voltage == 0x17C
    assert box.voltage2 == 0x123


def test_decode_ignores_other_ids():
    box = VwContactorBox()
    box.decode_can(0x0BC, _status_frame(100, 300, 300))
    assert box.amperes == 0
    assert box.voltage == 0


def test_decode_short_frame_raises():
    with pytest.raises(ValueError):
        VwContactorBox().decode_can(0x0BB, b"\x00\x01")


def test_crc_ignores_checksum_slot():
    rest = bytes([0x03, 0x29, 0, 0, 0, 0, 0x26])
    assert vw_crc(b"\x00" + rest) == vw_crc(b"\xff" + rest)
    assert 0 <= vw_crc(b"\x00" + rest) <= 0xFF


def test_crc_short_frame_raises():
    with pytest.raises(ValueError):
        vw_crc(b"\x00\x01\x02")


def test_off_frame_layout():
    can = RecordingCan()
    VwContactorBox().control_contactors(0, can)
    (frame,) = _control_frames(can)
    assert frame[1:] == bytes([0x00, 0x28, 0, 0, 0, 0, 0x26])
    assert frame[0] == vw_crc(frame)


@pytest.mark.parametrize("opmode", [1, 4])
def test_run_closes_main_and_negative(opmode):
    can = RecordingCan()
    VwContactorBox().control_contactors(opmode, can)
    (frame,) = _control_frames(can)
    assert frame[1] & 0x50 == 0x50
    assert frame[2] & 0x01 == 0x01
    assert frame[2] & 0xFE == 0x28
    assert frame[0] == vw_crc(frame)


def test_precharge_closes_precharge_only():
    can = RecordingCan()
    VwContactorBox().control_contactors(2, can)
    (frame,) = _control_frames(can)
    assert frame[1] & 0xF0 == 0x10
    assert frame[2] & 0x01 == 0x01


def test_precharge_fail_matches_off_contactors():
    can = RecordingCan()
    VwContactorBox().control_contactors(3, can)
    (frame,) = _control_frames(can)
    assert frame[1] & 0xF0 == 0
    assert frame[2] == 0x28


def test_counter_wraps_after_fifteen():
    can = RecordingCan()
    box = VwContactorBox()
    for _ in range(17):
        box.control_contactors(0, can)
    counters = [frame[1] & 0x0F for frame in _control_frames(can)]
    assert counters == list(range(16)) + [0]
    assert all(frame[0] == vw_crc(frame) for frame in _control_frames(can))


def test_keepalive_every_hundred_calls():
    can = RecordingCan()
    box = VwContactorBox()
    for _ in range(99):
        box.control_contactors(0, can)
    assert not [f for f in can.sent if f[0] == 0x1BFFDA19]
    box.control_contactors(0, can)
    assert [f for f in can.sent if f[0] == 0x1BFFDA19] == [(0x1BFFDA19, b"\x00\x00")]
    for _ in range(100):
        box.control_contactors(0, can)
    assert len([f for f in can.sent if f[0] == 0x1BFFDA19]) == 2