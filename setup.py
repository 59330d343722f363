import pathlib
import re

from setuptools import setup, find_packages


def read_version() -> str:
    init_file = pathlib.Path(__file__).parent.joinpath('intern_eq', '__init__.py')
    match = re.search(r'^__version__ = "(.+)"$', init_file.read_text(encoding='utf-8'), re.MULTILINE)
    if match is None:
        raise RuntimeError(f'__version__ not found in {init_file}')
    return match.group(1)


setup(
    name="intern_eq",
    version=read_version(),
    packages=find_packages(include=["intern_eq", "intern_eq.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
        "docs": ["sphinx", "sphinx_rtd_theme"],
    },
)
