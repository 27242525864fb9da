import pytest

from vcucore.params import (
    CanIo,
    DirMode,
    OpMode,
    ParamStore,
    ParamType,
    PotMode,
)


@pytest.fixture
def store():
    return ParamStore()


def test_defaults_from_table(store):
    assert store["potmax"] == 4095
    assert store["udcsw"] == 330
    assert store.get_int("VehicleCan") == 1
    assert store.get_float("BMS_VmaxLimit") == pytest.approx(4.2)


def test_values_start_at_zero(store):
    assert store["udc"] == 0
    assert store.get_bool("din_start") is False


def test_set_and_get_value(store):
    store["udc"] = 355.7
    assert store.get_float("udc") == pytest.approx(355.7)
    assert store.get_int("udc") == 355


def test_get_int_truncates_toward_zero(store):
    store["idc"] = -12.9
    assert store.get_int("idc") == -12


def test_get_bool(store):
    store["din_brake"] = 1
    assert store.get_bool("din_brake") is True


def test_param_out_of_range_rejected(store):
    with pytest.raises(ValueError):
        store["potmax"] = 5000
    with pytest.raises(ValueError):
        store["regenmax"] = 1
    assert store["potmax"] == 4095


def test_param_boundaries_accepted(store):
    store["regenmax"] = -30
    store["potmin"] = 0
    assert store["regenmax"] == -30
    assert store["potmin"] == 0


def test_unknown_name(store):
    with pytest.raises(KeyError):
        store["nonexistent"]
    with pytest.raises(KeyError):
        store["nonexistent"] = 1
    with pytest.raises(KeyError):
        store.attributes("nonexistent")


def test_contains(store):
    assert "throtmax" in store
    assert "nonexistent" not in store


def test_load_defaults_restores_params_only(store):
    store["throtmax"] = 50
    store["udc"] = 400
    store.load_defaults()
    assert store["throtmax"] == 100
    assert store["udc"] == 400


def test_iteration_order_and_types(store):
    names = list(store)
    assert names[0] == "Inverter"
    types = [store.attributes(n).type for n in names]
    first_value = types.index(ParamType.VALUE)
    assert all(t is ParamType.PARAM for t in types[:first_value])
    assert all(t is ParamType.VALUE for t in types[first_value:])


def test_ids_unique(store):
    ids = [store.attributes(n).id for n in store]
    assert len(ids) == len(set(ids))


def test_attributes(store):
    attr = store.attributes("throtramp")
    assert attr.unit == "%/10ms"
    assert attr.min == pytest.approx(0.1)
    assert attr.max == 100
    assert store.attributes("version").unit == "4=2.17.A"


def test_defaults_within_range(store):
    for name in store:
        attr = store.attributes(name)
        if attr.type is ParamType.PARAM:
            assert attr.min <= attr.default <= attr.max


def test_enums_stored_in_params(store):
    store["opmode"] = OpMode.CHARGE
    assert store.get_int("opmode") == 4
    store["dirmode"] = DirMode.DEFAULTFORWARD
    assert store.get_int("dirmode") == 4
    store["potmode"] = PotMode.DUALCHANNEL
    assert store.get_int("potmode") == 1
    store["canio"] = CanIo.START | CanIo.BRAKE
    assert store.get_int("canio") == 6
    assert store.get_int("canio") & CanIo.BRAKE
    store["canio"] = CanIo.BMS
    assert store.get_int("canio") == 32