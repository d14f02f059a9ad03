"""
Setup script for VidLuxe.

This file provides backward compatibility for installations that don't support PEP 517.
All configuration is in pyproject.toml.
"""

from setuptools import setup

if __name__ == "__main__":
    setup()
