[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rfbkit"
version = "0.1.0"
description = "RFB (VNC) protocol toolkit: wire messages, handshakes, security handlers, a small server loop and FBS recording playback"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["vnc", "rfb", "remote-framebuffer", "fbs", "protocol"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Communications",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rfbkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
