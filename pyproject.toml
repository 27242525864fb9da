[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "vcucore"
version = "0.1.0"
description = "Control logic for an electric vehicle control unit: parameters, throttle processing, CAN device interfaces and charger frames"
requires-python = ">=3.10"
dependencies = []
keywords = ["can", "canbus", "electric-vehicle", "vcu", "throttle", "inverter", "charger", "bms"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vcucore-terminal = "vcucore.terminal:main"

[tool.setuptools.packages.find]
include = ["vcucore*"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
