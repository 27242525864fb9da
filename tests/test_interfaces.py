import pytest

from vcucore.interfaces import (
    Bms,
    ChargeInterface,
    CruiseState,
    DcDc,
    Heater,
    Inverter,
    NoCharger,
    NoHeater,
    NoInverter,
    NoLever,
    NoVehicle,
    RecordingCan,
    UnusedChargeInterface,
    Vehicle,
)
from vcucore.params import ParamStore


@pytest.fixture
def params():
    return ParamStore()


def test_recording_can_keeps_frames():
    can = RecordingCan()
    can.register_user_message(0x108)
    can.send(0x109, bytearray(b"\x01\x02"))
    assert can.registered == [0x108]
    assert can.sent == [(0x109, b"\x01\x02")]


def test_abstract_bases_cannot_be_instantiated(params):
    with pytest.raises(TypeError):
        Vehicle(params)
    with pytest.raises(TypeError):
        Inverter()
    with pytest.raises(TypeError):
        Heater()


def test_no_vehicle_ready_follows_t15(params):
    state = {"on": False}
    vehicle = NoVehicle(params, lambda: state["on"])
    assert vehicle.ready() is False
    state["on"] = True
    assert vehicle.ready() is True


def test_vehicle_start_follows_din_start(params):
    vehicle = NoVehicle(params, lambda: True)
    params["din_start"] = 0
    assert vehicle.start() is False
    params["din_start"] = 1
    assert vehicle.start() is True


def test_vehicle_defaults(params):
    vehicle = NoVehicle(params, lambda: False)
    assert vehicle.get_gear() is None
    assert vehicle.get_cruise_state() == CruiseState.NONE
    assert vehicle.get_front_rear_balance() == 50
    assert vehicle.enable_traction_control() is False


def test_set_can_interface_stores_bus(params):
    can = RecordingCan()
    devices = [NoVehicle(params, lambda: True), NoLever(), NoInverter(), NoCharger(),
               ChargeInterface(), Bms(params), DcDc(), NoHeater()]
    for device in devices:
        device.set_can_interface(can)
        assert device.can is can


def test_no_lever_knows_no_gear():
    assert NoLever().get_gear() is None


def test_no_inverter_reports_zero():
    inverter = NoInverter()
    inverter.set_torque(50.0)
    readings = [inverter.motor_temperature(), inverter.inverter_temperature(),
                inverter.inverter_voltage(), inverter.motor_speed(), inverter.inverter_state()]
    assert readings == [0, 0, 0, 0, 0]


def test_no_charger_never_requests():
    assert NoCharger().control_charge(True, True) is False


def test_charge_interfaces():
    base = ChargeInterface()
    assert base.ac_request(True) is False
    assert base.dcfc_request(True) is False
    unused = UnusedChargeInterface()
    assert unused.ac_request(True) is True
    assert unused.ac_request(False) is False
    assert unused.dcfc_request(True) is False


def test_bms_default_publishes_limit(params):
    params["BMS_Vmin"] = 3.5
    Bms(params).task_100ms()
    assert params["BMS_ChargeLim"] == 9999
    assert params["BMS_Vmin"] == 0


def test_bms_subclass_limit(params):
    class LimitedBms(Bms):
        def max_charge_current(self):
            return 25.7

    LimitedBms(params).task_100ms()
    assert params["BMS_ChargeLim"] == 25


def test_no_heater_temperature():
    heater = NoHeater()
    heater.set_power(1000, True)
    heater.set_target_temperature(20.0)
    assert heater.temperature() == 0