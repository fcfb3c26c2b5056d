[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "statusblocks"
version = "0.1.0"
description = "Status bar blocks: battery, CPU, GPU, disk, package updates, Docker, GitHub, external IP, custom commands and focused window"
requires-python = ">=3.10"
dependencies = []
keywords = ["status bar", "i3", "sway", "monitoring", "battery", "cpu", "sysfs"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["statusblocks"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
