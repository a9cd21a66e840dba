#!/usr/bin/env python3
"""
Setup script for the FaceWatch auto-lock service.
"""

import sys
from setuptools import setup, find_packages


def read_requirements(filename):
    """Read requirements from file."""
    with open(filename, 'r') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


# Read README for long description
def read_readme():
    """Read README file."""
    try:
        with open("README.md", "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return "Presence-aware workstation auto-lock using idle time and face detection"


if sys.version_info < (3, 9):
    sys.exit("ERROR: Python 3.9 or higher is required")


setup(
    name="facewatch-autolock",
    version="1.0.0",
    author="FaceWatch Team",
    description="Locks the workstation when the user is idle and no face is visible on the webcam",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Win32 (MS Windows)",
        "Environment :: X11 Applications",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "dev": [
            "pytest>=7.4.2",
        ],
        "gui": [
            "PySide6>=6.6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "facewatch=main:main",
        ],
    },
    keywords=[
        "auto-lock",
        "presence-detection",
        "face-detection",
        "computer-vision",
        "idle-detection",
        "workstation-security",
    ],
)
