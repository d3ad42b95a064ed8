[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mimeindex"
version = "0.1.0"
description = "Parse RFC 822 messages into a MIME tree and build IMAP BODYSTRUCTURE responses"
requires-python = ">=3.10"
dependencies = []
keywords = ["mime", "rfc822", "imap", "bodystructure", "email", "envelope"]
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
    "Topic :: Communications :: Email :: Post-Office :: IMAP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mimeindex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
