"""Vehicle control logic: inputs, direction, throttle, DC bus, SoC and cruise control."""

from __future__ import annotations

from dataclasses import dataclass

from vcucore.errors import ErrorCode, ErrorLog
from vcucore.interfaces import CruiseState, Gear, Shifter, ShifterGear, Vehicle
from vcucore.params import CanIo, DirMode, OpMode, ParamStore, PotMode
from vcucore.throttle import Throttle

CAN_TIMEOUT = 1
UAUX_GAIN = 210
_STATIONARY_RPM = 50

_VEHICLE_DIRECTION = {Gear.PARK: 2, Gear.REVERSE: -1, Gear.NEUTRAL: 0, Gear.DRIVE: 1}
_SHIFTER_DIRECTION = {
    ShifterGear.PARK: 2,
    ShifterGear.REVERSE: -1,
    ShifterGear.NEUTRAL: 0,
    ShifterGear.DRIVE: 1,
}


@dataclass(frozen=True)
class DigitalInputs:
    """States of the hard-wired digital inputs."""

    start: bool = False
    brake: bool = False
    forward: bool = False
    reverse: bool = False
    gp_12v: bool = False


@dataclass(frozen=True)
class ShuntReadings:
    """Raw readings of the current shunt or battery box, in the device's own units."""

    voltage: float = 0
    voltage2: float = 0
    voltage3: float = 0
    amperes: float = 0
    kw: float = 0
    kwh: float = 0
    ah: float = 0


@dataclass(frozen=True)
class UdcResult:
    """Outcome of DC bus processing."""

    udc: float
    overvoltage: bool
    open_contactors: bool


def _ramp_up(current: int, target: int, rate: int) -> int:
    if target < current or current + rate > target:
        return target
    return current + rate


def _ramp_down(current: int, target: int, rate: int) -> int:
    if target > current or current - rate < target:
        return target
    return current - rate


class VehicleControl:
    """Ties the parameter database, throttle and error log together."""

    def __init__(self, params: ParamStore, throttle: Throttle, errors: ErrorLog) -> None:
        self.params = params
        self.throttle = throttle
        self.errors = errors
        self.soc = 0.0
        self._can_io_active = False
        self._cruise_transition = False
        self._cruise_target = 0

    def post_error_if_running(self, code: ErrorCode) -> None:
        """Record an error only while in run mode."""
        if self.params.get_int("opmode") == OpMode.RUN:
            self.errors.post(code)

    def get_dig_inputs(self, inputs: DigitalInputs, now: int, last_rx: int) -> None:
        """Combine wired inputs with CAN-supplied ones; drop CAN inputs on timeout."""
        canio = self.params.get_int("canio")
        self._can_io_active |= canio != 0

        if now - last_rx >= CAN_TIMEOUT and self._can_io_active:
            canio = 0
            self.params["canio"] = 0
            self.errors.post(ErrorCode.CANTIMEOUT)

        self.params["din_cruise"] = int(bool(canio & CanIo.CRUISE))
        self.params["din_start"] = int(inputs.start or bool(canio & CanIo.START))
        self.params["din_brake"] = int(inputs.brake or bool(canio & CanIo.BRAKE))
        self.params["din_forward"] = int(inputs.forward or bool(canio & CanIo.FWD))
        self.params["din_reverse"] = int(inputs.reverse or bool(canio & CanIo.REV))
        self.params["din_bms"] = int(bool(canio & CanIo.BMS))
        self.params["din_12Vgp"] = int(inputs.gp_12v)

    def get_user_throttle_command(self, pot1: int, pot2: int) -> float:
        """Check the pedal channels for plausibility and return the throttle in percent."""
        brake = self.params.get_bool("din_brake")
        potmode = self.params.get_int("potmode")
        direction = self.params.get_int("dir")

        self.params["pot"] = pot1
        self.params["pot2"] = pot2

        in_range1, pot1 = self.throttle.check_and_limit_range(pot1, 0)
        in_range2, pot2 = self.throttle.check_and_limit_range(pot2, 1)
        channel = 0

        if potmode == PotMode.SINGLECHANNEL:
            if not in_range1:
                self.post_error_if_running(ErrorCode.THROTTLE1)
                self.params["potnom"] = 0
                return 0.0
        elif potmode == PotMode.DUALCHANNEL:
            if in_range1 and in_range2:
                nom1 = self.throttle.normalize_throttle(pot1, 0)
                nom2 = self.throttle.normalize_throttle(pot2, 1)
                if abs(nom2 - nom1) > 10.0:
                    self.post_error_if_running(ErrorCode.THROTTLE12DIFF)
                    # limp mode: use the lower channel, limited to half travel
                    if nom1 < nom2:
                        if nom1 > 50.0:
                            pot1 = self.throttle.potmax[0] // 2
                        channel = 0
                    else:
                        if nom2 > 50.0:
                            pot2 = self.throttle.potmax[1] // 2
                        channel = 1
            elif in_range1:
                self.post_error_if_running(ErrorCode.THROTTLE2)
                channel = 0
            elif in_range2:
                self.post_error_if_running(ErrorCode.THROTTLE1)
                channel = 1
            else:
                self.post_error_if_running(ErrorCode.THROTTLE12)
                return 0.0
        else:
            self.post_error_if_running(ErrorCode.THROTTLEMODE)
            return 0.0

        if direction in (0, 2):
            return 0.0

        if channel == 0:
            return self.throttle.calc_throttle(pot1, 0, brake)
        return self.throttle.calc_throttle(pot2, 1, brake)

    def select_direction(self, vehicle: Vehicle, shifter: Shifter) -> int:
        """Work out the driving direction and store it in ``dir``.

        The vehicle's gear wins, then the shifter's, then the wired inputs.
        Returns -1 for reverse, 0 neutral, 1 drive and 2 park.
        """
        selected = self.params.get_int("dir")
        dirmode = self.params.get_int("dirmode")
        sign = -1 if dirmode & DirMode.REVERSED else 1

        vehicle_gear = vehicle.get_gear()
        shifter_gear = None if vehicle_gear is not None else shifter.get_gear()

        if vehicle_gear is not None:
            selected = _VEHICLE_DIRECTION[vehicle_gear]
        elif shifter_gear is not None:
            selected = _SHIFTER_DIRECTION[shifter_gear]
        else:
            forward = self.params.get_bool("din_forward")
            reverse = self.params.get_bool("din_reverse")
            user = 0
            if dirmode == DirMode.DEFAULTFORWARD:
                if forward and reverse:
                    user = 0
                elif reverse:
                    user = -1
                else:
                    user = 1
            elif (dirmode & 1) == DirMode.BUTTON:
                # both buttons at once force neutral (charge mode)
                if forward and reverse:
                    user = 0
                elif forward:
                    user = sign
                elif reverse:
                    user = -sign
                else:
                    user = selected
            else:
                if forward != reverse:
                    user = sign if forward else -sign
            selected = user

        self.params["dir"] = selected
        return selected

    def process_udc(self, motor_speed: int, shunt: ShuntReadings, uaux_raw: int) -> UdcResult:
        """Publish shunt readings and the 12 V supply; check for DC overvoltage."""
        shunt_type = self.params.get_int("Type")
        p = self.params

        if shunt_type == 0:
            udc = shunt.voltage / 1000
            udc2 = shunt.voltage2 / 1000
            udc3 = shunt.voltage3 / 1000
            p["udc"] = udc
            p["udc2"] = udc2
            p["udc3"] = udc3
            p["idc"] = shunt.amperes / 1000
            p["power"] = shunt.kw / 1000
            p["KWh"] = shunt.kwh / 1000
            p["AMPh"] = shunt.ah / 3600
            p["deltaV"] = max(udc2 / 2 - udc3, (udc2 + udc3) - udc)
        elif shunt_type == 1:
            udc = shunt.voltage2 / 1000
            idc = shunt.amperes / 1000
            p["udc"] = udc
            p["udc2"] = shunt.voltage / 1000
            p["udc3"] = 0.0
            p["idc"] = idc
            p["power"] = udc * idc / 1000
        elif shunt_type == 2:
            p["udc"] = shunt.voltage * 0.5
            p["udc2"] = shunt.voltage2 * 0.0625
            p["udc3"] = 0.0
            p["idc"] = shunt.amperes * 0.1

        udclim = p.get_float("udclim")
        udc = p.get_float("udc")
        p["uaux"] = uaux_raw / UAUX_GAIN

        overvoltage = udc > udclim
        open_contactors = False
        if overvoltage:
            # a stationary motor means the overvoltage comes from outside
            open_contactors = abs(motor_speed) < _STATIONARY_RPM
            p["opmode"] = OpMode.OFF
            self.errors.post(ErrorCode.OVERVOLTAGE)
        return UdcResult(udc, overvoltage, open_contactors)

    def process_throttle(self, speed: int, pot1: int, pot2: int) -> float:
        """Return the final torque request in percent, after cruise, ramps and limits."""
        p = self.params
        if speed < p.get_int("throtramprpm"):
            self.throttle.throttle_ramp = p.get_float("throtramp")
        else:
            self.throttle.throttle_ramp = p.attributes("throtramp").max

        setpoint = self.get_user_throttle_command(pot1, pot2)

        if p["cruisespeed"] > 0:
            self.throttle.brkcruise = 0.0
            self.throttle.speedflt = 5
            self.throttle.speedkp = 0.25
            self.throttle.cruise_speed = p.get_int("cruisespeed")
            cruise = self.throttle.calc_cruise_speed(abs(p.get_int("speed")))
            setpoint = max(cruise, setpoint)

        setpoint = self.throttle.ramp_throttle(setpoint)
        setpoint = self.throttle.udc_limit_command(setpoint, p.get_float("udc"))
        setpoint = self.throttle.idc_limit_command(setpoint, abs(p.get_float("idc")))
        setpoint = self.throttle.speed_limit_command(setpoint, abs(speed))

        setpoint, derated = self.throttle.temperature_derate(p["tmphs"], p["tmphsmax"], setpoint)
        if derated:
            self.errors.post(ErrorCode.TMPHSMAX)
        setpoint, derated = self.throttle.temperature_derate(p["tmpm"], p["tmpmmax"], setpoint)
        if derated:
            self.errors.post(ErrorCode.TMPMMAX)

        setpoint = min(max(setpoint, -100.0), 100.0)
        p["potnom"] = setpoint
        return setpoint

    def display_throttle(self, pot1: int, pot2: int) -> None:
        """Publish the raw pedal readings."""
        self.params["pot"] = pot1
        self.params["pot2"] = pot2

    def calc_soc(self) -> float:
        """Estimate state of charge from energy used and battery capacity."""
        capacity = self.params.get_float("BattCap")
        used = abs(self.params.get_float("KWh"))
        self.soc = min(100.0, 100.0 - 100.0 * used / capacity)
        self.params["SOC"] = self.soc
        return self.soc

    def process_cruise_control_buttons(self) -> None:
        """Handle set/resume/cancel; with cruise off the buttons adjust regen level."""
        p = self.params
        cruisespeed = p.get_int("cruisespeed")
        state = CruiseState(p.get_int("cruisestt") & 0xF)
        buttons = CruiseState.RESUME | CruiseState.SET

        if self._cruise_transition:
            if not state & buttons:
                self._cruise_transition = False
            return
        if state & buttons:
            self._cruise_transition = True

        if state & CruiseState.ON and p.get_int("opmode") == OpMode.RUN:
            if cruisespeed <= 0:
                current = p.get_int("speed")
                if state & CruiseState.SET and current > 500:
                    self._cruise_target = current
                    cruisespeed = current
                elif state & CruiseState.RESUME and self._cruise_target > 0:
                    cruisespeed = current
            elif state & CruiseState.CANCEL or p.get_bool("din_brake"):
                cruisespeed = 0
            elif state & CruiseState.RESUME:
                self._cruise_target += p.get_int("cruisestep")
            elif state & CruiseState.SET:
                self._cruise_target -= p.get_int("cruisestep")
        else:
            cruisespeed = 0
            self._cruise_target = 0
            regen = p.get_int("regenlevel")
            if state & CruiseState.RESUME:
                regen = min(3, regen + 1)
            elif state & CruiseState.SET:
                regen = max(0, regen - 1)
            p["regenlevel"] = regen

        ramp = p.get_int("cruiseramp")
        if cruisespeed <= 0:
            p["cruisespeed"] = 0
        elif cruisespeed < self._cruise_target:
            p["cruisespeed"] = _ramp_up(cruisespeed, self._cruise_target, ramp)
        elif cruisespeed > self._cruise_target:
            p["cruisespeed"] = _ramp_down(cruisespeed, self._cruise_target, ramp)
        else:
            p["cruisespeed"] = cruisespeed