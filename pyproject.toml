[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtcnetutil"
version = "0.1.0"
description = "Asyncio networking utilities for real-time communication stacks: packet buffers, in-memory connections, UDP listeners and interface discovery"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["webrtc", "udp", "networking", "asyncio", "packet-buffer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
rtcnetutil-ifaces = "rtcnetutil.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rtcnetutil"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
