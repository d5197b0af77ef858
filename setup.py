"""
Setup script for satx.

satx is an adaptive practice engine with a terminal front-end. It:

1. Tracks per-topic mastery with ELO-style ratings
2. Picks the next quiz by weighing mastery, error rate and staleness
3. Builds ordered practice sessions and a mastery dashboard

The 'satx' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="satx",
    version="1.0.0",
    description="Adaptive practice engine: ELO topic mastery, weighted item selection, session feeds",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["satx", "satx.*"]),
    py_modules=["config"],
    package_data={"satx.data": ["catalog.json"]},
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "satx=satx.cli.practice_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning adaptive practice elo mastery cli education",
)
