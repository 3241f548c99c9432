[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metricscope"
version = "0.1.0"
description = "Metric buckets, an in-memory metric store, span-field labelling and readable value formatting"
requires-python = ">=3.10"
dependencies = []
keywords = ["metrics", "monitoring", "observability", "tracing", "histogram", "quantiles"]
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
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
metricscope-crusher = "metricscope.crusher:main"

[tool.hatch.build.targets.wheel]
packages = ["metricscope"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
