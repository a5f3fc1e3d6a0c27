"""
setup.py for formstate.

The core has no runtime dependencies beyond the standard library. The Qt
bridge (formstate.qt) needs the ``qt`` extra (`pip install formstate[qt]`).
"""

from setuptools import find_packages, setup


if __name__ == "__main__":
    setup(
        name="formstate",
        version="0.1.0",
        description="Declarative data model for dynamic forms with minimal-diff change notifications",
        python_requires=">=3.9",
        packages=find_packages(include=["formstate", "formstate.*"]),
        install_requires=[],
        extras_require={
            "qt": ["PyQt6>=6.4"],
            "dev": ["pytest>=7.0"],
        },
        classifiers=[
            "Programming Language :: Python :: 3",
            "Operating System :: OS Independent",
        ],
    )
