"""Base classes for the devices the controller talks to, plus the null devices."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Callable, Mapping, Protocol

from vcucore.params import ParamStore


class CanInterface(Protocol):
    """What a device needs from a CAN bus."""

    def register_user_message(self, can_id: int) -> None:
        """Ask for frames with this identifier to be delivered."""

    def send(self, can_id: int, data: bytes) -> None:
        """Transmit one frame."""


class RecordingCan:
    """CAN interface that keeps everything registered and sent."""

    def __init__(self) -> None:
        self.registered: list[int] = []
        self.sent: list[tuple[int, bytes]] = []

    def register_user_message(self, can_id: int) -> None:
        self.registered.append(can_id)

    def send(self, can_id: int, data: bytes) -> None:
        self.sent.append((can_id, bytes(data)))


class _CanDevice:
    """Shared bookkeeping: the bus, the last frame seen and periodic task counts."""

    can: CanInterface | None = None
    last_frame: tuple[int, bytes] | None = None
    tick_counts: Mapping[str, int] = MappingProxyType({})

    def _record_frame(self, can_id: int, data: bytes) -> None:
        self.last_frame = (can_id, bytes(data))

    def _tick(self, period: str) -> None:
        counts = vars(self).setdefault("tick_counts", {})
        counts[period] = counts.get(period, 0) + 1

    def _reset(self) -> None:
        self.last_frame = None
        vars(self)["tick_counts"] = {}


class Gear(enum.IntEnum):
    """Gear reported by a vehicle."""

    PARK = 0
    REVERSE = 1
    NEUTRAL = 2
    DRIVE = 3


class CruiseState(enum.IntFlag):
    """Cruise control buttons and state bits."""

    NONE = 0
    ON = 1
    CANCEL = 2
    SET = 4
    RESUME = 8


class Vehicle(ABC, _CanDevice):
    """A vehicle body: dashboard, gear selection, start signals."""

    known_gear: Gear | None = None
    fuel_level: float | None = None
    dash_active: bool = True

    def __init__(self, params: ParamStore) -> None:
        self.params = params
        self.can = None

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")

    def task_200ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("200ms")

    def dash_off(self) -> None:
        """Mark the dashboard as switched off."""
        self.dash_active = False

    @abstractmethod
    def set_rev_counter(self, speed: int) -> None:
        """Show the motor speed on the rev counter."""

    @abstractmethod
    def set_temperature_gauge(self, temp: float) -> None:
        """Show a temperature on the dashboard gauge."""

    def set_fuel_gauge(self, level: float) -> None:
        """Remember the state of charge (0-100 %) for the fuel gauge."""
        self.fuel_level = level

    def get_gear(self) -> Gear | None:
        """Return the selected gear, or None when the vehicle does not know it."""
        return self.known_gear

    def get_cruise_state(self) -> CruiseState:
        return CruiseState.NONE

    def get_front_rear_balance(self) -> float:
        """Torque split: 100 means all front, 0 all rear."""
        return 50.0

    def enable_traction_control(self) -> bool:
        return False

    @abstractmethod
    def ready(self) -> bool:
        """Whether the vehicle is switched on."""

    def start(self) -> bool:
        """Whether the start signal is present."""
        return self.params.get_bool("din_start")


class NoVehicle(Vehicle):
    """Vehicle with no CAN integration; readiness comes from the T15 input."""

    def __init__(self, params: ParamStore, t15_input: Callable[[], bool]) -> None:
        super().__init__(params)
        self._t15_input = t15_input
        self.rev_counter = 0
        self.temperature = 0.0

    def set_rev_counter(self, speed: int) -> None:
        """Remember the speed; there is no rev counter to drive."""
        self.rev_counter = speed

    def set_temperature_gauge(self, temp: float) -> None:
        """Remember the temperature; there is no gauge to drive."""
        self.temperature = temp

    def ready(self) -> bool:
        return bool(self._t15_input())


class ShifterGear(enum.IntEnum):
    """Gear reported by a gear lever."""

    PARK = 0
    REVERSE = 1
    NEUTRAL = 2
    DRIVE = 3


class Shifter(_CanDevice):
    """A gear lever; the base class knows no gear."""

    known_gear: ShifterGear | None = None

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")

    def task_200ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("200ms")

    def get_gear(self) -> ShifterGear | None:
        """Return the selected gear, or None when the lever does not know it."""
        return self.known_gear


class NoLever(Shifter):
    """Used when no gear lever is fitted."""


class Inverter(ABC, _CanDevice):
    """A motor inverter."""

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")

    def deinit(self) -> None:
        """Called when switching to another inverter; forgets recorded state."""
        self._reset()

    @abstractmethod
    def set_torque(self, torque_percent: float) -> None:
        """Command torque in percent of maximum."""

    @abstractmethod
    def motor_temperature(self) -> float: ...

    @abstractmethod
    def inverter_temperature(self) -> float: ...

    @abstractmethod
    def inverter_voltage(self) -> float: ...

    @abstractmethod
    def motor_speed(self) -> float: ...

    @abstractmethod
    def inverter_state(self) -> int: ...


class NoInverter(Inverter):
    """Used when no inverter is connected; reports zero for everything."""

    torque_request: float = 0.0

    def set_torque(self, torque_percent: float) -> None:
        """Remember the request; there is nothing to command."""
        self.torque_request = torque_percent

    def motor_temperature(self) -> float:
        return 0.0

    def inverter_temperature(self) -> float:
        return 0.0

    def inverter_voltage(self) -> float:
        return 0.0

    def motor_speed(self) -> float:
        return 0.0

    def inverter_state(self) -> int:
        return 0


class ChargerHardware(_CanDevice):
    """An on-board charger; the base class never requests charging."""

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")

    def task_200ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("200ms")

    def deinit(self) -> None:
        """Called when switching to another charger; forgets recorded state."""
        self._reset()

    def control_charge(self, run_charge: bool, ac_request: bool) -> bool:
        """Return whether the charger asks for the HV system."""
        return False


class NoCharger(ChargerHardware):
    """Used when no charger is fitted."""


class ChargeInterface(_CanDevice):
    """A charge port or fast-charge interface."""

    last_dcfc_request: bool | None = None
    last_ac_request: bool | None = None

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")

    def task_200ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("200ms")

    def deinit(self) -> None:
        """Called when switching to another interface; forgets recorded state."""
        self._reset()
        self.last_dcfc_request = None
        self.last_ac_request = None

    def dcfc_request(self, run_charge: bool) -> bool:
        """Record the run request; the base interface never grants fast charging."""
        self.last_dcfc_request = bool(run_charge)
        return False

    def ac_request(self, run_charge: bool) -> bool:
        """Record the run request; the base interface never grants AC charging."""
        self.last_ac_request = bool(run_charge)
        return False


class UnusedChargeInterface(ChargeInterface):
    """No charge interface: AC charging follows the run request directly."""

    def ac_request(self, run_charge: bool) -> bool:
        """Record the run request and grant AC charging exactly when it is set."""
        self.last_ac_request = bool(run_charge)
        return self.last_ac_request


class Bms(_CanDevice):
    """A battery management system; the base reports no limits."""

    def __init__(self, params: ParamStore) -> None:
        self.params = params
        self.can = None

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def deinit(self) -> None:
        """Called when switching to another BMS; forgets recorded state."""
        self._reset()

    def max_charge_current(self) -> float:
        return 9999.0

    def task_100ms(self) -> None:
        """Publish the charge limit and clear the cell readings."""
        self.params["BMS_ChargeLim"] = int(self.max_charge_current())
        for name in ("BMS_Vmin", "BMS_Vmax", "BMS_Tmin", "BMS_Tmax"):
            self.params[name] = 0.0


class DcDc(_CanDevice):
    """A DC-DC converter; the base class only records what it sees."""

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def deinit(self) -> None:
        """Called when switching to another converter; forgets recorded state."""
        self._reset()

    def task_1ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("1ms")

    def task_10ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("10ms")

    def task_100ms(self) -> None:
        """Count the periodic call; the base class has no other work."""
        self._tick("100ms")


class Heater(ABC, _CanDevice):
    """A cabin heater."""

    def set_can_interface(self, can: CanInterface) -> None:
        self.can = can

    def decode_can(self, can_id: int, data: bytes) -> None:
        """Keep the received frame; the base class does not interpret it."""
        self._record_frame(can_id, data)

    def temperature(self) -> float:
        return 0.0

    def deinit(self) -> None:
        """Called when switching to another heater; forgets recorded state."""
        self._reset()

    @abstractmethod
    def set_target_temperature(self, temp: float) -> None:
        """Set the target temperature in °C."""

    @abstractmethod
    def set_power(self, power: int, heat_request: bool) -> None:
        """Called cyclically with the power in watts."""


class NoHeater(Heater):
    """Used when no heater is fitted."""

    target_temperature: float | None = None
    power: int = 0
    heat_request: bool = False

    def set_target_temperature(self, temp: float) -> None:
        """Remember the target; there is nothing to control."""
        self.target_temperature = temp

    def set_power(self, power: int, heat_request: bool) -> None:
        """Remember the request; there is nothing to control."""
        self.power = power
        self.heat_request = heat_request