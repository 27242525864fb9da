"""Control and readout of the VW plug-in hybrid battery contactor box."""

from __future__ import annotations

from vcucore.interfaces import CanInterface

STATUS_ID = 0x0BB
CONTROL_ID = 0x0BA
KEEPALIVE_ID = 0x1BFFDA19

_POLY = 0x2F
_XOR_OUTPUT = 0xFF
_MAGIC_0BA = (
    0x6C, 0xAA, 0x01, 0xCF, 0x39, 0x38, 0xDF, 0x4F,
    0x13, 0x2A, 0x73, 0x8C, 0xF1, 0x76, 0xF6, 0x70,
)
_KEEPALIVE_PERIOD = 100


def vw_crc(data: bytes) -> int:
    """Return the checksum of a 0x0BA frame; byte 0 (the checksum slot) is ignored."""
    if len(data) < 8:
        raise ValueError("frame must hold 8 bytes")
    crc = 0xFF
    for value in (*data[1:8], _MAGIC_0BA[data[1] & 0x0F]):
        crc ^= value
        for _ in range(8):
            crc = ((crc << 1) ^ _POLY) if crc & 0x80 else (crc << 1)
            crc &= 0xFF
    return crc ^ _XOR_OUTPUT


class VwContactorBox:
    """Reads current and voltages from the box and drives its contactors."""

    def __init__(self) -> None:
        self.amperes = 0
        self.voltage = 0.0
        self.voltage2 = 0.0
        self.temperature = 0
        self.kw = 0
        self.kwh = 0
        self.ah = 0
        self._keepalive_timer = 0
        self._counter = 0

    def register_can_messages(self, can: CanInterface) -> None:
        can.register_user_message(STATUS_ID)

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Update readings from a status frame; other frames are ignored."""
        if can_id != STATUS_ID:
            return
        if len(data) < 6:
            raise ValueError("status frame must hold at least 6 bytes")
        raw = ((data[2] << 4) | (data[1] >> 4)) & 0xFFF
        self.amperes = raw - 0x1000 if raw & 0x800 else raw
        self.voltage = float((data[5] << 4) | ((data[4] >> 4) & 0xF))
        self.voltage2 = float(((data[4] & 0xF) << 8) | data[3])

    def control_contactors(self, opmode: int, can: CanInterface) -> None:
        """Send the contactor command for this operating mode; call every 10 ms."""
        self._keepalive_timer += 1
        if self._keepalive_timer == _KEEPALIVE_PERIOD:
            can.send(KEEPALIVE_ID, bytes(2))
            self._keepalive_timer = 0

        frame = bytearray([0x00, self._counter, 0x28, 0x00, 0x00, 0x00, 0x00, 0x26])
        if opmode == 2:  # precharge: negative and precharge contactors
            frame[2] |= 0x01
            frame[1] |= 0x10
        elif opmode in (1, 4):  # run or charge: negative, main and precharge
            frame[2] |= 0x01
            frame[1] |= 0x50
        frame[0] = vw_crc(frame)
        can.send(CONTROL_ID, bytes(frame))

        self._counter += 1
        if self._counter > 0x0F:
            self._counter = 0