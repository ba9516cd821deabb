from __future__ import annotations

from setuptools import find_packages, setup

from paramparser.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

if __name__ == "__main__":
    setup(
        name="paramparser",
        version=PROJECT_VERSION,
        description="Named string parameters loaded from line-oriented text files",
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["paramparser", "paramparser.*"]),
        install_requires=[
            "loguru>=0.7",
            "pydantic>=2.5",
            "python-dotenv>=1.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
                "hypothesis>=6.90",
            ],
        },
        entry_points={
            "console_scripts": [
                "paramparser=paramparser.cli:main",
            ],
        },
    )
