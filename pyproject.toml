[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lorawan_regions"
version = "0.1.0"
description = "LoRaWAN regional channel plans: data rates, channel selection, join channels and receive window configuration"
requires-python = ">=3.10"
dependencies = []
keywords = ["lorawan", "lora", "radio", "channel-plan", "us915", "eu868", "iot"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lorawan_regions"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
