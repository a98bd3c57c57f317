[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "beepkit"
version = "0.1.0"
description = "PC speaker tones, musical notes, busy-wait timing and low-level I/O port helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["beeper", "pc-speaker", "music", "notes", "io-ports", "pit", "timing"]
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
    "Topic :: Multimedia :: Sound/Audio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["beepkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
