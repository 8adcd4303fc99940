#!/usr/bin/env python3
"""Setup script for BranchMap."""

from setuptools import setup, find_packages


setup(
    name="branchmap",
    version="1.0.0",
    description="A collapsible, editable mind map for Linux",
    author="BranchMap Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "branchmap": ["theme.css"],
    },
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "loguru>=0.7.0",
    ],
    extras_require={
        "gui": [
            "PyGObject>=3.46.0",
            "pycairo>=1.25.0",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "branchmap=branchmap.launcher:main",
        ],
        "gui_scripts": [
            "branchmap-gui=branchmap.launcher:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: GTK",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business",
    ],
)
