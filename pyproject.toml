[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "osdemos"
version = "0.1.0"
description = "Small runnable demonstrations of operating-system ideas: processes, threads, locks, condition variables, semaphores, scheduling and UDP messaging."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating systems",
    "threads",
    "semaphores",
    "condition variables",
    "lottery scheduling",
    "producer consumer",
    "dining philosophers",
    "education",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
osdemos-lottery = "osdemos.lottery:main"
osdemos-pc = "osdemos.bounded_buffer:main"
osdemos-dining = "osdemos.philosophers:main"
osdemos-threads = "osdemos.thread_demos:main"
osdemos-udp-client = "osdemos.udp:client_main"
osdemos-udp-server = "osdemos.udp:server_main"

[tool.hatch.build.targets.wheel]
packages = ["osdemos"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
