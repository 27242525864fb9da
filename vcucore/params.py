"""Parameter and display-value database of the vehicle control unit."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

from vcucore.errors import ErrorCode

VERSION = "2.17.A"


class OpMode(enum.IntEnum):
    """Operating mode of the controller."""

    OFF = 0
    RUN = 1
    PRECHARGE = 2
    PCHFAIL = 3
    CHARGE = 4


class ChargeType(enum.IntEnum):
    """Kind of charging in progress."""

    OFF = 0
    AC = 1
    DCFC = 2


class DirMode(enum.IntEnum):
    """How the direction inputs are interpreted."""

    BUTTON = 0
    SWITCH = 1
    REVERSED = 2
    DEFAULTFORWARD = 4


class PotMode(enum.IntEnum):
    """Single or dual channel throttle pedal."""

    SINGLECHANNEL = 0
    DUALCHANNEL = 1


class CanIo(enum.IntFlag):
    """Digital inputs that may be supplied over CAN."""

    CRUISE = 1
    START = 2
    BRAKE = 4
    FWD = 8
    REV = 16
    BMS = 32


class ParamType(enum.Enum):
    """Whether an entry is a saveable parameter or a display value."""

    PARAM = "param"
    TESTPARAM = "testparam"
    VALUE = "value"


@dataclass(frozen=True)
class ParamAttributes:
    """Static description of one parameter or display value."""

    name: str
    unit: str
    id: int
    type: ParamType
    category: str = ""
    min: float = 0.0
    max: float = 0.0
    default: float = 0.0
    hidden: bool = False


CAT_THROTTLE = "Throttle"
CAT_POWER = "Power Limit"
CAT_CONTACT = "Contactor Control"
CAT_TEST = "Testing"
CAT_COMM = "Communication"
CAT_SETUP = "General Setup"
CAT_CLOCK = "RTC Module"
CAT_HEATER = "Heater Module"
CAT_BMS = "Battery Management"
CAT_CRUISE = "Cruise Control"
CAT_LEXUS = "Gearbox Control"
CAT_CHARGER = "Charger Control"
CAT_DCDC = "DC-DC Converter"
CAT_SHUNT = "ISA Shunt Control"
CAT_IOPINS = "General Purpose I/O"
CAT_PWM = "PWM Control"

VERSTR = f"4={VERSION}"
PINFUNCS = (
    "0=None, 1=ChaDeMoAlw, 2=OBCEnable, 3=HeaterEnable, 4=RunIndication, 5=WarnIndication,"
    "6=CoolantPump, 7=NegContactor, 8=BrakeLight, 9=ReverseLight, 10=HeatReq, 11=HVRequest,"
    "12=DCFCRequest, 13=BrakeVacPump, 14=PwmTim3"
)
APINFUNCS = "0=None, 1=ProxPilot, 2=BrakeVacSensor"
SHIFTERS = "0=None, 1=BMW_F30, 2=JLR_G1, 3=JLR_G2"
SHNTYPE = "0=ISA, 1=SBOX, 2=VAG"
DMODES = "0=CLOSED, 1=OPEN, 2=ERROR, 3=INVALID"
POTMODES = "0=SingleChannel, 1=DualChannel"
BTNSWITCH = "0=Button, 1=Switch, 2=CAN"
DIRMODES = "0=Button, 1=Switch, 2=ButtonReversed, 3=SwitchReversed, 4=DefaultForward"
INVMODES = (
    "0=None, 1=Leaf_Gen1, 2=GS450H, 3=UserCAN, 4=OpenI, 5=Prius_Gen3, "
    "6=Outlander, 7=GS300H 8=RearOutlander"
)
PLTMODES = "0=Absent, 1=ACStd, 2=ACchg, 3=Error, 4=CCS_Not_Rdy, 5=CCS_Rdy, 6=Static"
VEHMODES = "0=BMW_E46, 1=BMW_E65, 2=Classic, 3=None, 5=BMW_E39, 6=VAG, 7=Subaru, 8=BMW_E31"
BMSMODES = "0=Off, 1=SimpBMS, 2=TiDaisychainSingle, 3=TiDaisychainDual"
OPMODES = "0=Off, 1=Run, 2=Precharge, 3=PchFail, 4=Charge"
DOW = "0=Sun, 1=Mon, 2=Tue, 3=Wed, 4=Thu, 5=Fri, 6=Sat"
CHGTYPS = "0=Off, 1=AC, 2=DCFC"
DCDCTYPES = "0=NoDCDC, 1=TeslaG2"
STATUS = (
    "0=None, 1=UdcLow, 2=UdcHigh, 4=UdcBelowUdcSw, 8=UdcLim, 16=EmcyStop, "
    "32=MProt, 64=PotPressed, 128=TmpHs, 256=WaitStart"
)
CCS_STATUS = (
    "0=NotRdy, 1=ready, 2=SWoff, 3=interruption, 4=Prech, 5=insulmon, "
    "6=estop, 7=malfunction, 15=invalid"
)
DIRS = "-1=Reverse, 0=Neutral, 1=Drive, 2=Park"
ONOFF = "0=Off, 1=On, 2=na"
LOWHIGH = "0=LOW, 1=HIGH, 2=AUTO"
OKERR = "0=Error, 1=Ok, 2=na"
CANSPEEDS = "0=125k, 1=250k, 2=500k, 3=800k, 4=1M"
CANIOS = "1=Cruise, 2=Start, 4=Brake, 8=Fwd, 16=Rev, 32=Bms"
CANPERIODS = "0=100ms, 1=10ms"
ERRLIGHTS = "0=Off, 4=EPC, 8=engine"
CRUISESTATES = "0=None, 1=On, 2=Disable, 4=Set, 8=Resume"
CDMSTAT = "1=Charging, 2=Malfunction, 4=ConnLock, 8=BatIncomp, 16=SystemMalfunction, 32=Stop"
HTTYPE = "0=None, 1=Ampera, 2=VW"
HTCTRL = "0=Disable, 1=Enable, 2=Timer"
CHGMODS = "0=Off, 1=EXT_DIGI, 2=Volt_Ampera, 3=Leaf_PDM, 4=TeslaOI, 5=Out_lander 6=Elcon"
CHGCTRL = "0=Enable, 1=Disable, 2=Timer"
CHGINT = "0=Unused, 1=i3LIM, 2=Chademo, 3=CPC"
CAN3SPD = "0=k33.3, 1=k500. 2=k100"
TRNMODES = "0=Manual, 1=Auto"
CAN_DEV = "0=CAN1, 1=CAN2"
MOTORS_ACT = "0=Mg1and2, 1=Mg1, 2=Mg2"
ERROR_LIST = ", ".join(["0=NONE"] + [f"{code.value}={code.name}" for code in ErrorCode])


def _p(category: str, name: str, unit: str, lo: float, hi: float, default: float, pid: int) -> ParamAttributes:
    return ParamAttributes(name, unit, pid, ParamType.PARAM, category, lo, hi, default)


def _v(name: str, unit: str, vid: int) -> ParamAttributes:
    return ParamAttributes(name, unit, vid, ParamType.VALUE)


PARAM_LIST: tuple[ParamAttributes, ...] = (
    _p(CAT_SETUP, "Inverter", INVMODES, 0, 8, 0, 5),
    _p(CAT_SETUP, "Vehicle", VEHMODES, 0, 8, 0, 6),
    _p(CAT_SETUP, "Transmission", TRNMODES, 0, 1, 0, 78),
    _p(CAT_SETUP, "interface", CHGINT, 0, 3, 0, 39),
    _p(CAT_SETUP, "chargemodes", CHGMODS, 0, 6, 0, 37),
    _p(CAT_SETUP, "InverterCan", CAN_DEV, 0, 1, 0, 70),
    _p(CAT_SETUP, "VehicleCan", CAN_DEV, 0, 1, 1, 71),
    _p(CAT_SETUP, "ShuntCan", CAN_DEV, 0, 1, 0, 72),
    _p(CAT_SETUP, "LimCan", CAN_DEV, 0, 1, 0, 73),
    _p(CAT_SETUP, "ChargerCan", CAN_DEV, 0, 1, 1, 74),
    _p(CAT_SETUP, "BMSCan", CAN_DEV, 0, 1, 1, 89),
    _p(CAT_SETUP, "OBD2Can", CAN_DEV, 0, 1, 0, 96),
    _p(CAT_SETUP, "CanMapCan", CAN_DEV, 0, 1, 0, 97),
    _p(CAT_SETUP, "DCDCCan", CAN_DEV, 0, 1, 1, 107),
    _p(CAT_SETUP, "GearLvr", SHIFTERS, 0, 3, 0, 108),
    _p(CAT_SETUP, "MotActive", MOTORS_ACT, 0, 2, 0, 129),
    _p(CAT_THROTTLE, "potmin", "dig", 0, 4095, 0, 7),
    _p(CAT_THROTTLE, "potmax", "dig", 0, 4095, 4095, 8),
    _p(CAT_THROTTLE, "pot2min", "dig", 0, 4095, 4095, 9),
    _p(CAT_THROTTLE, "pot2max", "dig", 0, 4095, 4095, 10),
    _p(CAT_THROTTLE, "regenrpm", "rpm", 100, 10000, 1500, 60),
    _p(CAT_THROTTLE, "regenendrpm", "rpm", 100, 10000, 100, 126),
    _p(CAT_THROTTLE, "regenmax", "%", -30, 0, -10, 61),
    _p(CAT_THROTTLE, "regenBrake", "%", -30, 0, -10, 122),
    _p(CAT_THROTTLE, "regenramp", "%/10ms", 0.1, 100, 100, 68),
    _p(CAT_THROTTLE, "potmode", POTMODES, 0, 1, 0, 11),
    _p(CAT_THROTTLE, "dirmode", DIRMODES, 0, 4, 1, 12),
    _p(CAT_THROTTLE, "reversemotor", ONOFF, 0, 1, 0, 127),
    _p(CAT_THROTTLE, "throtramp", "%/10ms", 0.1, 100, 100, 13),
    _p(CAT_THROTTLE, "throtramprpm", "rpm", 0, 20000, 20000, 14),
    _p(CAT_THROTTLE, "revlim", "rpm", 0, 20000, 6000, 15),
    _p(CAT_THROTTLE, "bmslimhigh", "%", 0, 100, 50, 17),
    _p(CAT_THROTTLE, "bmslimlow", "%", -100, 0, -1, 18),
    _p(CAT_THROTTLE, "udcmin", "V", 0, 1000, 450, 19),
    _p(CAT_THROTTLE, "udclim", "V", 0, 1000, 520, 20),
    _p(CAT_THROTTLE, "idcmax", "A", 0, 5000, 5000, 21),
    _p(CAT_THROTTLE, "idcmin", "A", -5000, 0, -5000, 22),
    _p(CAT_THROTTLE, "tmphsmax", "°C", 50, 150, 85, 23),
    _p(CAT_THROTTLE, "tmpmmax", "°C", 70, 300, 300, 24),
    _p(CAT_THROTTLE, "throtmax", "%", 0, 100, 100, 25),
    _p(CAT_THROTTLE, "throtmin", "%", -100, 0, -100, 26),
    _p(CAT_THROTTLE, "throtmaxRev", "%", 0, 100, 30, 123),
    _p(CAT_THROTTLE, "throtdead", "%", 0, 50, 10, 76),
    _p(CAT_THROTTLE, "RegenBrakeLight", "%", -100, 0, -15, 128),
    _p(CAT_THROTTLE, "throtrpmfilt", "rpm/10ms", 0.1, 200, 15, 131),
    _p(CAT_LEXUS, "Gear", LOWHIGH, 0, 2, 0, 27),
    _p(CAT_LEXUS, "OilPump", "%", 0, 100, 50, 28),
    _p(CAT_CRUISE, "cruisestep", "rpm", 1, 1000, 200, 29),
    _p(CAT_CRUISE, "cruiseramp", "rpm/100ms", 1, 1000, 20, 30),
    _p(CAT_CRUISE, "regenlevel", "", 0, 3, 2, 31),
    _p(CAT_CONTACT, "udcsw", "V", 0, 1000, 330, 32),
    _p(CAT_CONTACT, "cruiselight", ONOFF, 0, 1, 0, 33),
    _p(CAT_CONTACT, "errlights", ERRLIGHTS, 0, 255, 0, 34),
    _p(CAT_COMM, "CAN3Speed", CAN3SPD, 0, 2, 0, 77),
    _p(CAT_CHARGER, "BattCap", "kWh", 0.1, 250, 22, 38),
    _p(CAT_CHARGER, "Voltspnt", "V", 0, 1000, 395, 40),
    _p(CAT_CHARGER, "Pwrspnt", "W", 0, 12000, 1500, 41),
    _p(CAT_CHARGER, "IdcTerm", "A", 0, 150, 0, 56),
    _p(CAT_CHARGER, "CCS_ICmd", "A", 0, 150, 0, 42),
    _p(CAT_CHARGER, "CCS_ILim", "A", 0, 350, 100, 43),
    _p(CAT_CHARGER, "CCS_SOCLim", "%", 0, 100, 80, 44),
    _p(CAT_CHARGER, "SOCFC", "%", 0, 100, 50, 79),
    _p(CAT_CHARGER, "Chgctrl", CHGCTRL, 0, 2, 0, 45),
    _p(CAT_CHARGER, "ChgAcVolt", "Vac", 0, 250, 240, 120),
    _p(CAT_CHARGER, "ChgEff", "%", 0, 100, 90, 121),
    _p(CAT_DCDC, "DCdc_Type", DCDCTYPES, 0, 1, 0, 105),
    _p(CAT_DCDC, "DCSetPnt", "V", 9, 15, 14, 106),
    _p(CAT_BMS, "BMS_Mode", BMSMODES, 0, 3, 0, 90),
    _p(CAT_BMS, "BMS_Timeout", "sec", 1, 120, 10, 91),
    _p(CAT_BMS, "BMS_VminLimit", "V", 0, 10, 3.0, 92),
    _p(CAT_BMS, "BMS_VmaxLimit", "V", 0, 10, 4.2, 93),
    _p(CAT_BMS, "BMS_TminLimit", "°C", -100, 100, 5, 94),
    _p(CAT_BMS, "BMS_TmaxLimit", "°C", -100, 100, 50, 95),
    _p(CAT_HEATER, "Heater", HTTYPE, 0, 2, 0, 57),
    _p(CAT_HEATER, "Control", HTCTRL, 0, 2, 0, 58),
    _p(CAT_HEATER, "HeatPwr", "W", 0, 6500, 0, 59),
    _p(CAT_HEATER, "HeatPercnt", "%", 0, 100, 0, 124),
    _p(CAT_CLOCK, "Set_Day", DOW, 0, 6, 0, 46),
    _p(CAT_CLOCK, "Set_Hour", "Hours", 0, 23, 0, 47),
    _p(CAT_CLOCK, "Set_Min", "Mins", 0, 59, 0, 48),
    _p(CAT_CLOCK, "Set_Sec", "Secs", 0, 59, 0, 49),
    _p(CAT_CLOCK, "Chg_Hrs", "Hours", 0, 23, 0, 50),
    _p(CAT_CLOCK, "Chg_Min", "Mins", 0, 59, 0, 51),
    _p(CAT_CLOCK, "Chg_Dur", "Mins", 0, 600, 0, 52),
    _p(CAT_CLOCK, "Pre_Hrs", "Hours", 0, 59, 0, 53),
    _p(CAT_CLOCK, "Pre_Min", "Mins", 0, 59, 0, 54),
    _p(CAT_CLOCK, "Pre_Dur", "Mins", 0, 60, 0, 55),
    _p(CAT_IOPINS, "Out1Func", PINFUNCS, 0, 13, 6, 80),
    _p(CAT_IOPINS, "Out2Func", PINFUNCS, 0, 13, 7, 81),
    _p(CAT_IOPINS, "Out3Func", PINFUNCS, 0, 13, 3, 82),
    _p(CAT_IOPINS, "SL1Func", PINFUNCS, 0, 13, 0, 83),
    _p(CAT_IOPINS, "SL2Func", PINFUNCS, 0, 13, 0, 84),
    _p(CAT_IOPINS, "PWM1Func", PINFUNCS, 0, 14, 0, 85),
    _p(CAT_IOPINS, "PWM2Func", PINFUNCS, 0, 14, 4, 86),
    _p(CAT_IOPINS, "PWM3Func", PINFUNCS, 0, 15, 2, 87),
    _p(CAT_IOPINS, "GP12VInFunc", PINFUNCS, 0, 13, 12, 98),
    _p(CAT_IOPINS, "HVReqFunc", PINFUNCS, 0, 13, 11, 99),
    _p(CAT_IOPINS, "GPA1Func", APINFUNCS, 0, 2, 0, 110),
    _p(CAT_IOPINS, "GPA2Func", APINFUNCS, 0, 2, 0, 111),
    _p(CAT_IOPINS, "ppthresh", "dig", 0, 4095, 2500, 114),
    _p(CAT_IOPINS, "BrkVacThresh", "dig", 0, 4095, 2500, 115),
    _p(CAT_IOPINS, "BrkVacHyst", "dig", 0, 4095, 2500, 116),
    _p(CAT_SHUNT, "IsaInit", ONOFF, 0, 1, 0, 75),
    _p(CAT_SHUNT, "Type", SHNTYPE, 0, 2, 0, 88),
    _p(CAT_PWM, "Tim3_Presc", "", 1, 72000, 719, 100),
    _p(CAT_PWM, "Tim3_Period", "", 1, 100000, 7200, 101),
    _p(CAT_PWM, "Tim3_1_OC", "", 1, 100000, 3600, 102),
    _p(CAT_PWM, "Tim3_2_OC", "", 1, 100000, 3600, 103),
    _p(CAT_PWM, "Tim3_3_OC", "", 1, 100000, 3600, 104),
    _v("version", VERSTR, 2000),
    _v("opmode", OPMODES, 2002),
    _v("chgtyp", CHGTYPS, 2003),
    _v("lasterr", ERROR_LIST, 2004),
    _v("status", STATUS, 2005),
    _v("udc", "V", 2006),
    _v("udc2", "V", 2007),
    _v("udc3", "V", 2008),
    _v("deltaV", "V", 2009),
    _v("INVudc", "V", 2010),
    _v("power", "kW", 2011),
    _v("idc", "A", 2012),
    _v("KWh", "kwh", 2013),
    _v("AMPh", "Ah", 2014),
    _v("SOC", "%", 2015),
    _v("BMS_Vmin", "V", 2084),
    _v("BMS_Vmax", "V", 2085),
    _v("BMS_Tmin", "°C", 2086),
    _v("BMS_Tmax", "°C", 2087),
    _v("BMS_ChargeLim", "A", 2088),
    _v("speed", "rpm", 2016),
    _v("Veh_Speed", "kph", 2017),
    _v("torque", "dig", 2018),
    _v("pot", "dig", 2019),
    _v("pot2", "dig", 2020),
    _v("potbrake", "dig", 2021),
    _v("brakepressure", "dig", 2022),
    _v("potnom", "%", 2023),
    _v("dir", DIRS, 2024),
    _v("tmphs", "°C", 2028),
    _v("tmpm", "°C", 2029),
    _v("tmpaux", "°C", 2030),
    _v("uaux", "V", 2031),
    _v("canio", CANIOS, 2032),
    _v("FrontRearBal", "%", 2082),
    _v("cruisespeed", "rpm", 2033),
    _v("cruisestt", CRUISESTATES, 2034),
    _v("din_cruise", ONOFF, 2035),
    _v("din_start", ONOFF, 2036),
    _v("din_brake", ONOFF, 2037),
    _v("din_forward", ONOFF, 2038),
    _v("din_reverse", ONOFF, 2039),
    _v("din_bms", ONOFF, 2040),
    _v("din_12Vgp", ONOFF, 2071),
    _v("handbrk", ONOFF, 2041),
    _v("Gear1", ONOFF, 2042),
    _v("Gear2", ONOFF, 2043),
    _v("Gear3", ONOFF, 2044),
    _v("T15Stat", ONOFF, 2045),
    _v("InvStat", ONOFF, 2046),
    _v("GearFB", LOWHIGH, 2047),
    _v("CableLim", "A", 2048),
    _v("PilotLim", "A", 2049),
    _v("PlugDet", ONOFF, 2050),
    _v("PilotTyp", PLTMODES, 2051),
    _v("CCS_I_Avail", "A", 2052),
    _v("CCS_V_Avail", "V", 2053),
    _v("CCS_I", "A", 2054),
    _v("CCS_Ireq", "A", 2068),
    _v("CCS_V", "V", 2055),
    _v("CCS_V_Min", "V", 2056),
    _v("CCS_V_Con", "V", 2057),
    _v("hvChg", ONOFF, 2058),
    _v("CCS_COND", CCS_STATUS, 2059),
    _v("CCS_State", "s", 2060),
    _v("CP_DOOR", DMODES, 2061),
    _v("CCS_Contactor", ONOFF, 2062),
    _v("Day", DOW, 2064),
    _v("Hour", "H", 2065),
    _v("Min", "M", 2066),
    _v("Sec", "S", 2067),
    _v("ChgT", "M", 2090),
    _v("HeatReq", ONOFF, 2069),
    _v("U12V", "V", 2070),
    _v("I12V", "A", 2083),
    _v("ChgTemp", "°C", 2078),
    _v("AC_Volts", "V", 2079),
    _v("AC_Amps", "A", 2089),
    _v("canctr", "dig", 2091),
    _v("cpuload", "%", 2063),
    _v("PPVal", "dig", 2094),
    _v("BrkVacVal", "dig", 2095),
    _v("tmpheater", "°C", 2096),
    _v("udcheater", "V", 2097),
    _v("powerheater", "W", 2098),
)


class ParamStore:
    """Holds the current value of every parameter and display value.

    Values are addressed by name. Parameters are range checked on
    assignment; display values accept any number.
    """

    def __init__(self) -> None:
        self._attrs: dict[str, ParamAttributes] = {a.name: a for a in PARAM_LIST}
        self._values: dict[str, float] = {}
        self.load_defaults()
        for name, attr in self._attrs.items():
            if attr.type is ParamType.VALUE:
                self._values[name] = float(attr.default)

    def attributes(self, name: str) -> ParamAttributes:
        """Return the static description of an entry."""
        try:
            return self._attrs[name]
        except KeyError:
            raise KeyError(f"unknown parameter: {name}") from None

    def __getitem__(self, name: str) -> float:
        self.attributes(name)
        return self._values[name]

    def __setitem__(self, name: str, value: float) -> None:
        attr = self.attributes(name)
        number = float(value)
        if attr.type is not ParamType.VALUE and not attr.min <= number <= attr.max:
            raise ValueError(
                f"{name}={number} outside range {attr.min} - {attr.max}"
            )
        self._values[name] = number

    def __contains__(self, name: object) -> bool:
        return name in self._attrs

    def __iter__(self) -> Iterator[str]:
        return iter(self._attrs)

    def __len__(self) -> int:
        return len(self._attrs)

    def get_int(self, name: str) -> int:
        """Return the value truncated towards zero."""
        return int(self[name])

    def get_float(self, name: str) -> float:
        return float(self[name])

    def get_bool(self, name: str) -> bool:
        return self[name] != 0

    def load_defaults(self) -> None:
        """Reset every parameter (not display values) to its default."""
        for name, attr in self._attrs.items():
            if attr.type is not ParamType.VALUE:
                self._values[name] = float(attr.default)