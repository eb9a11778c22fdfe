#!/usr/bin/env python3
"""
Setup script for Quire - site content pipeline.
"""

from setuptools import setup, find_packages

# Metadata and dependencies are defined in pyproject.toml

setup(
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'quire_pkg': [
            'templates/*.php',
        ],
    },
    include_package_data=True,
)
