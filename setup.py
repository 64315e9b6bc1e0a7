"""
Setup script for adaptive-portal-engine.

The adaptive learning engine of the learning portal. It serves three roles:

1. Adaptive testing - ability estimation and next-item selection
2. Flashcard review - SM-2 scheduling and due-set resolution
3. Mistake analysis - weak-area reports from incorrect answers

The 'portal-engine' command runs the engine over JSON snapshots.
"""

from setuptools import find_packages, setup

setup(
    name="adaptive-portal-engine",
    version="1.0.0",
    description="Adaptive learning engine: ability estimation, SM-2 review scheduling, mistake analysis",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Learning Portal",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        "python-dateutil>=2.8.0",
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
            "portal-engine=portal_engine.cli.engine_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition adaptive-testing education sm2",
)
