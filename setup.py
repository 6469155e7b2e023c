from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.org").read_text(encoding="utf-8")

setup(
    name="valvekv",
    version="0.1.0",
    description="Valve KeyValues parser and typed serializer in Python",
    long_description=long_description,
    long_description_content_type="text/x-org",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    extras_require={
        "test": ["pytest"],
    },
    keywords="keyvalues vdf valve source config parsing serialization dataclasses",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Text Processing :: Markup",
        "License :: Public Domain",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    license="CC0",
)
