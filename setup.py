from pathlib import Path  # isort: skip

from setuptools import find_packages, setup  # isort: skip


HERE = Path(__file__).resolve().parent


def get_long_description():
    readme = HERE / "README.md"
    if readme.is_file():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="dbapi-excavator",
    version="0.1.0",
    description="Timing, benchmarks and call logging for DB-API 2.0 connections",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests*"]),
    zip_safe=False,
    python_requires=">=3.8",
    install_requires=[
        "attrs>=20",
        "envier~=0.5",
        "wrapt>=1",
    ],
    extras_require={
        "test": [
            "mock",
            "pytest",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
    ],
)
