"""Throttle pedal processing: range checks, regen mapping, ramping and limits."""

from __future__ import annotations

from vcucore.params import ParamStore

POT_SLACK = 200
PEDAL_AVERAGE_LENGTH = 50


def _c_div(a: int, b: int) -> int:
    """Integer division truncating towards zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def change(x: float, in_min: float, in_max: float, out_min: float, out_max: float) -> int:
    """Map x linearly from [in_min, in_max] to [out_min, out_max] in integer arithmetic.

    All arguments are truncated to integers first and the division truncates
    towards zero. Raises ZeroDivisionError when in_min equals in_max.
    """
    x, in_min, in_max = int(x), int(in_min), int(in_max)
    out_min, out_max = int(out_min), int(out_max)
    return _c_div((x - in_min) * (out_max - out_min), in_max - in_min) + out_min


def _ramp_up(current: float, target: float, rate: float) -> float:
    if target < current or current + rate > target:
        return target
    return current + rate


def _ramp_down(current: float, target: float, rate: float) -> float:
    if target > current or current - rate < target:
        return target
    return current - rate


def _iir_filter(last: int, new: int, shift: int) -> int:
    return (new + (last << shift) - last) >> shift


def _iir_filter_f(last: float, new: float, shift: int) -> float:
    factor = 1 << shift
    return (new + last * factor - last) / factor


class Throttle:
    """Turns pedal readings into a torque request in percent.

    The tuning attributes are loaded from the parameter store on creation and
    may be changed freely afterwards. The maximum DC voltage is taken from
    ``udclim`` and the speed limit from ``revlim``.
    """

    def __init__(self, params: ParamStore) -> None:
        self.params = params
        self.potmin = [params.get_int("potmin"), params.get_int("pot2min")]
        self.potmax = [params.get_int("potmax"), params.get_int("pot2max")]
        self.regen_rpm = params.get_float("regenrpm")
        self.regenend_rpm = params.get_float("regenendrpm")
        self.regenmax = params.get_float("regenmax")
        self.regen_brake = params.get_float("regenBrake")
        self.regen_ramp = params.get_float("regenramp")
        self.throttle_ramp = params.get_float("throtramp")
        self.throtmax = params.get_float("throtmax")
        self.throtmax_rev = params.get_float("throtmaxRev")
        self.throtmin = params.get_float("throtmin")
        self.throtdead = params.get_float("throtdead")
        self.bmslimhigh = params.get_int("bmslimhigh")
        self.bmslimlow = params.get_int("bmslimlow")
        self.udcmin = params.get_float("udcmin")
        self.udcmax = params.get_float("udclim")
        self.idcmin = params.get_float("idcmin")
        self.idcmax = params.get_float("idcmax")
        self.speed_limit = params.get_int("revlim")
        self.throt_rpm_filt = params.get_float("throtrpmfilt")
        self.brknompedal = 0.0
        self.brkcruise = 0.0
        self.idle_speed = 0
        self.cruise_speed = 0
        self.speedkp = 0.0
        self.speedflt = 0
        self.idle_throt_lim = 0.0

        self._throttle_ramped = 0.0
        self._speed_filtered = 0.0
        self._cruise_speed_filtered = 0
        self._idc_filtered = 0.0
        self._limit_speed_filtered = 0
        self._regenlim = 0.0
        self._pedal_req = 0
        self._pedal_history = [0.0] * PEDAL_AVERAGE_LENGTH
        self._pedal_index = 0
        self._pedal_total = 0.0

    def check_and_limit_range(self, potval: int, pot_idx: int) -> tuple[bool, int]:
        """Return whether the reading is plausible, and the reading clamped to range.

        Inverted pedals (minimum above maximum) are handled. A reading more
        than POT_SLACK outside the range is implausible and replaced by the
        range minimum.
        """
        low = min(self.potmin[pot_idx], self.potmax[pot_idx])
        high = max(self.potmin[pot_idx], self.potmax[pot_idx])
        if potval + POT_SLACK < low or potval > high + POT_SLACK:
            return False, low
        return True, min(max(potval, low), high)

    def normalize_throttle(self, potval: int, pot_idx: int) -> float:
        """Scale a reading to 0-100 %; 0 for an unknown channel or an empty range."""
        if pot_idx not in (0, 1):
            return 0.0
        lo, hi = self.potmin[pot_idx], self.potmax[pot_idx]
        if lo == hi:
            return 0.0
        return 100.0 * (float(potval - lo) / float(hi - lo))

    def _average_position(self, position: float) -> float:
        self._pedal_index = (self._pedal_index + 1) % PEDAL_AVERAGE_LENGTH
        self._pedal_total -= self._pedal_history[self._pedal_index]
        self._pedal_total += position
        self._pedal_history[self._pedal_index] = position
        return self._pedal_total / PEDAL_AVERAGE_LENGTH

    def calc_throttle(self, potval: int, pot_idx: int, brake_pedal: bool) -> float:
        """Return the torque request in percent, with regen on brake or lift-off."""
        speed = abs(self.params.get_int("speed"))
        direction = self.params.get_int("dir")

        if abs(speed - self._speed_filtered) > self.throt_rpm_filt:
            if speed > self._speed_filtered:
                self._speed_filtered += self.throt_rpm_filt
            else:
                self._speed_filtered -= self.throt_rpm_filt
        else:
            self._speed_filtered = float(speed)
        speed = int(self._speed_filtered)

        if direction == 0:
            return 0.0

        if brake_pedal:
            if speed < 100:
                return 0.0
            if speed < self.regen_rpm:
                return float(change(speed, self.regenend_rpm, self.regen_rpm, 0, self.regen_brake))
            return self.regen_brake

        potnom = self.normalize_throttle(potval, pot_idx)
        if potnom < self.throtdead:
            potnom = 0.0
        else:
            potnom = (potnom - self.throtdead) * (100.0 / (100.0 - self.throtdead))

        pedal_pos = potnom
        average = self._average_position(pedal_pos)
        pedal_change = pedal_pos - average
        if pedal_change < -1.0:
            self._pedal_req = -1
        elif pedal_change > 1.0:
            self._pedal_req = 1
        else:
            potnom = average

        if speed < 100:
            self._regenlim = 0.0
        elif speed < self.regen_rpm:
            self._regenlim = float(change(speed, self.regenend_rpm, self.regen_rpm, 0, self.regenmax))
        else:
            self._regenlim = self.regenmax

        top = self.throtmax if direction == 1 else self.throtmax_rev
        return change(potnom, 0, 100, self._regenlim * 10, top * 10) * 0.1

    def ramp_throttle(self, potnom: float) -> float:
        """Clamp to [throtmin, throtmax] and apply the up and regen ramps."""
        potnom = max(min(potnom, self.throtmax), self.throtmin)

        if potnom >= self._throttle_ramped:
            rate = self.throttle_ramp if potnom > 0 else self.regen_ramp
            self._throttle_ramped = _ramp_up(self._throttle_ramped, potnom, rate)
            return self._throttle_ramped

        if potnom >= 0:
            self._throttle_ramped = potnom
            return potnom

        if self._throttle_ramped > 0:
            self._throttle_ramped = 0.0
        self._throttle_ramped = _ramp_down(self._throttle_ramped, potnom, self.regen_ramp)
        return self._throttle_ramped

    def calc_idle_speed(self, speed: int) -> float:
        """Proportional throttle to hold the idle speed, capped at idle_throt_lim."""
        return min(self.idle_throt_lim, self.speedkp * (self.idle_speed - speed))

    def calc_cruise_speed(self, speed: int) -> float:
        """Proportional throttle to hold the cruise speed, within [brkcruise, 100]."""
        self._cruise_speed_filtered = _iir_filter(self._cruise_speed_filtered, int(speed), self.speedflt)
        potnom = self.speedkp * (self.cruise_speed - self._cruise_speed_filtered)
        return max(self.brkcruise, min(100.0, potnom))

    def temperature_derate(self, temp: float, temp_max: float, setpoint: float) -> tuple[float, bool]:
        """Return the derated setpoint and whether derating is active.

        Full power up to temp_max, half power within 2 degrees above it,
        nothing beyond.
        """
        if temp <= temp_max:
            limit = 100.0
        elif temp < temp_max + 2.0:
            limit = 50.0
        else:
            limit = 0.0

        if setpoint >= 0:
            setpoint = min(setpoint, limit)
        else:
            setpoint = max(setpoint, -limit)
        return setpoint, limit < 100.0

    def udc_limit_command(self, setpoint: float, udc: float) -> float:
        """Reduce drive torque near udcmin and regen near udcmax; off when udcmin is 0."""
        if self.udcmin <= 0:
            return setpoint
        if setpoint >= 0:
            res = max(0.0, (udc - self.udcmin) * 5)
            return min(setpoint, res)
        res = min(0.0, (udc - self.udcmax) * 3.5)
        return max(setpoint, res)

    def idc_limit_command(self, setpoint: float, idc: float) -> float:
        """Limit the setpoint so the filtered DC current stays within idcmin-idcmax."""
        self._idc_filtered = _iir_filter_f(self._idc_filtered, idc, 4)
        if setpoint >= 0:
            res = max(0.0, (self.idcmax - self._idc_filtered) * 10)
            return min(res, setpoint)
        res = min(0.0, (self.idcmin - self._idc_filtered) * 10)
        return max(res, setpoint)

    def speed_limit_command(self, setpoint: float, speed: int) -> float:
        """Reduce positive torque as the filtered speed nears speed_limit."""
        self._limit_speed_filtered = _iir_filter(self._limit_speed_filtered, int(speed), 4)
        if setpoint > 0:
            res = max(0, _c_div(self.speed_limit - self._limit_speed_filtered, 4))
            return min(res, setpoint)
        return setpoint