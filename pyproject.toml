[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luna"
version = "0.1.0"
description = "Agent tooling for code repositories: file tools, guarded terminal execution, a tool registry with execution policies, and session stores."
requires-python = ">=3.10"
dependencies = []
keywords = ["agent", "tools", "tool-registry", "sessions", "llm", "code"]
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
    "Topic :: Software Development",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["luna"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
