[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "newdns"
version = "0.1.0"
description = "A framework for building authoritative DNS servers from callback-driven zones"
requires-python = ">=3.10"
keywords = ["dns", "authoritative", "nameserver", "zone", "server", "resolver"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "dnspython>=2.4",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
newdns-example = "newdns.example:main"

[tool.hatch.build.targets.wheel]
packages = ["newdns"]

[tool.pytest.ini_options]
addopts = "-ra"
