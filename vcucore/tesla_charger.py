"""Control of open-source Tesla charger controllers over CAN."""

from __future__ import annotations

from vcucore.interfaces import CanInterface, ChargerHardware
from vcucore.params import ParamStore

REQUEST_ID = 0x108
COMMAND_ID = 0x109
_HV_ON = 0xAA
_HV_OFF = 0xCC
_ENABLE = 0xA
_DISABLE = 0xC


class TeslaCharger(ChargerHardware):
    """Sends charge setpoints and follows the charger's HV request."""

    def __init__(self, params: ParamStore) -> None:
        self.params = params
        self.can: CanInterface | None = None
        self._hv_request = False
        self._charger_run = False
        self._counter = 0

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can
        can.register_user_message(REQUEST_ID)

    def decode_can(self, can_id: int, data: bytes) -> None:
        if can_id != REQUEST_ID or not data:
            return
        if data[0] == _HV_ON:
            self._hv_request = True
        elif data[0] == _HV_OFF:
            self._hv_request = False

    def task_100ms(self) -> None:
        """Send voltage, setpoint and power limit to the charger."""
        if self.can is None:
            raise RuntimeError("no CAN interface set")
        hv_volts = self.params.get_int("udc") & 0xFFFF
        hv_setpoint = self.params.get_int("Voltspnt") & 0xFFFF
        power = self.params.get_int("Pwrspnt") & 0xFFFF
        bms_power = (hv_volts * self.params.get_int("BMS_ChargeLim")) & 0xFFFF
        power = min(power, bms_power)

        state = _ENABLE if self._charger_run else _DISABLE
        frame = bytes([
            self.params.get_int("opmode") & 0xFF,
            *hv_volts.to_bytes(2, "little"),
            *hv_setpoint.to_bytes(2, "little"),
            *power.to_bytes(2, "little"),
            (state << 4) | self._counter,
        ])
        self._counter += 1
        if self._counter >= 0xF:
            self._counter = 0
        self.can.send(COMMAND_ID, frame)

    def control_charge(self, run_charge: bool, ac_request: bool) -> bool:
        """Enable the charger on AC request; return whether it wants HV."""
        self._charger_run = ac_request
        return self._hv_request