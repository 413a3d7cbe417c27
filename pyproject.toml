[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wumiibo"
version = "0.1.0"
description = "Model of an NFC figure service: decrypted amiibo dumps, tag state tracking and IPC command handling"
requires-python = ">=3.10"
dependencies = []
keywords = ["amiibo", "nfc", "emulation", "ini", "ipc"]
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
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wumiibo"]

[tool.pytest.ini_options]
addopts = "-ra"
