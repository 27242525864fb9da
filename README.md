# vcucore

`vcucore` holds the control logic of an electric vehicle control unit as
plain Python objects: the parameter database with its attributes and
defaults, a small error log, the interfaces that vehicles, shifters,
inverters, chargers, battery management systems, DC/DC converters and
heaters implement, the throttle pipeline, and the CAN frame handling for a
VW PHEV contactor box and open-source Tesla charger controllers.

Nothing here talks to hardware. CAN traffic goes through an object that
implements `CanInterface` (`register_user_message(can_id)` and
`send(can_id, data)`); `RecordingCan` is one that keeps the registered IDs
in `registered` and the sent frames in `sent`, which makes the logic easy
to drive and inspect.

## Installation

```
pip install .
```

Python 3.10 or later is required. The package has no runtime dependencies.

## Modules

- `vcucore.params` – `ParamStore`, a store of named parameters and display
  values. Entries are read and written with `store[name]`; parameters are
  range checked on assignment (`ValueError`) and unknown names raise
  `KeyError`. It also offers `get_int`, `get_float`, `get_bool`,
  `attributes` (a `ParamAttributes` record with unit, id, type, category,
  min, max and default) and `load_defaults`. Enums: `OpMode`,
  `ChargeType`, `DirMode`, `PotMode`, `CanIo`, `ParamType`.
- `vcucore.errors` – `ErrorCode` (each with a `severity` from
  `ErrorSeverity`) and `ErrorLog`, a fixed-size ring buffer with `post`,
  `last`, `entries` and `format_all`.
- `vcucore.interfaces` – base classes `Vehicle`, `Shifter`, `Inverter`,
  `ChargerHardware`, `ChargeInterface`, `Bms`, `DcDc` and `Heater`, the
  enums `Gear`, `ShifterGear` and `CruiseState`, and the do-nothing variants
  `NoVehicle`, `NoLever`, `NoInverter`, `NoCharger`,
  `UnusedChargeInterface` and `NoHeater`.
- `vcucore.vag_sbox` – `VwContactorBox`, which decodes current and voltages
  from frame 0x0BB and drives the contactors with frame 0x0BA (plus a
  keep-alive frame every 100 calls), and `vw_crc`, the checksum used on
  0x0BA.
- `vcucore.tesla_charger` – `TeslaCharger`, which follows the charger's HV
  request on 0x108 and sends the 0x109 control frame on `task_100ms`.
- `vcucore.throttle` – `Throttle`, covering range checks, normalisation,
  dead zone, pedal averaging, regen tapering, ramping, idle and cruise
  speed control and the voltage, current, speed and temperature limits;
  `change` is the integer linear mapping used throughout.
- `vcucore.control` – `VehicleControl`, which ties the pieces together:
  digital inputs (`DigitalInputs`), direction selection, DC bus processing
  from shunt readings (`ShuntReadings`, returning a `UdcResult`), the
  throttle command, state of charge and cruise control buttons.
- `vcucore.terminal` – text output of the parameter list, attributes and
  values, the error listing, and `run_command` to dispatch a command line.

## Example

```python
from vcucore.params import ParamStore
from vcucore.interfaces import RecordingCan
from vcucore.vag_sbox import VwContactorBox

params = ParamStore()
print(params.get_float("udcmin"))      # 450.0, the default

can = RecordingCan()
box = VwContactorBox()
box.register_can_messages(can)
box.control_contactors(params.get_int("opmode"), can)
print(can.sent)                        # [(0xBA, b'...')]
```

## Terminal

```
vcucore-terminal list atr
```

runs the commands given as arguments over a fresh parameter store; with no
arguments it reads one command per line from standard input. It
understands `list`, `atr`, `all`, `defaults` and `errors`. An unknown
command is reported on standard error and makes the exit status 1.

## What it does not do

- The terminal cannot set or read single parameters, and has no commands
  to save or load parameters, map CAN messages, stream values or reset a
  device. Parameters live only in memory in a `ParamStore`; nothing is
  stored on disk.
- There is no CAN bus driver and no scheduler: the caller supplies a
  `CanInterface` and calls the `task_*` methods at the right intervals.

## Tests

```
pip install .[test]
pytest
```