#!/usr/bin/env python3
"""
Setup script for cryptoservice
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="cryptoservice",
    version="1.0.0",
    description="Hashing, password hashing, MACs, symmetric encryption and key derivation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    python_requires=">=3.10",
    install_requires=[
        "argon2-cffi>=21.2",
        "bcrypt>=4.0",
        "click>=8.0",
        "cryptography>=41.0",
        "pydantic>=2.0",
        "rich>=13.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cryptoservice=cryptoservice.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
