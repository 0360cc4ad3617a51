"""
Setup script for coach-progression.

coach-progression is the progression engine of a communication coaching
path. It turns exercise outcomes into:

1. Competence Ledger - Four competences plus an unassigned remainder, summing to 100
2. Proficiency Score - Weighted coverage, quality, consistency, recency and voice
3. Levels & Achievements - Communicator level and one-way unlockable badges

The 'coach-progress' command works on a local JSON progress file.
"""

from setuptools import find_packages, setup

setup(
    name="coach-progression",
    version="1.0.0",
    description="Competence ledger, proficiency scoring and achievements for communication coaching",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Coach Progression",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.12.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "coach-progress=progression.cli.main:main",
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
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="learning competences progression gamification coaching",
)
