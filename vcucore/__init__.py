"""Control logic for an electric vehicle control unit: parameters, errors, device interfaces, throttle and CAN frames."""

__version__ = "0.1.0"