"""
Lesson Craft video backend: setuptools build script.

Usage:
    # Development (editable install):
    pip install -e .[test]

    # Run the server:
    lessoncraft-server        # or: python3 main.py

Tests:
    python3 -m unittest discover -s tests
"""

from setuptools import setup, find_namespace_packages

APP_NAME = "lessoncraft"

setup(
    name=APP_NAME,
    version="1.0.0",
    description="YouTube transcript acquisition and video lesson activities for Lesson Craft",
    packages=find_namespace_packages(include=["lessoncraft", "lessoncraft.*"]),
    install_requires=[
        "requests>=2.28.0",
        "youtube-transcript-api>=1.0.0",
        "Flask>=2.3",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "lessoncraft-server=lessoncraft.cli:main",
        ],
    },
    python_requires=">=3.10",
)
