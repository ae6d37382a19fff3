[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "idcframe"
version = "1.0.0"
description = "Building blocks for data-exchange services (text, time, file, log, TCP, FTP, ring queue and process heartbeat utilities) and a surface weather observation generator."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "framework",
    "file-transfer",
    "ftp",
    "tcp",
    "logging",
    "heartbeat",
    "meteorology",
    "observations",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Internet :: File Transfer Protocol (FTP)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
crtsurfdata = "idcframe.surfdata:main"

[tool.hatch.build.targets.wheel]
packages = ["idcframe"]

[tool.hatch.build.targets.sdist]
include = ["idcframe", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
