[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubehooks"
version = "0.1.0"
description = "Kubernetes webhook handlers for token authentication, access authorization and pod admission, with a small custom-resource model."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kubernetes",
    "webhook",
    "authentication",
    "authorization",
    "admission",
    "tokenreview",
    "subjectaccessreview",
    "json-patch",
    "crd",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: System :: Systems Administration :: Authentication/Directory",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kubehooks = "kubehooks.server:main"

[tool.hatch.build.targets.wheel]
packages = ["kubehooks"]

[tool.hatch.build.targets.sdist]
include = ["kubehooks", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
