# -*- coding: utf-8 -*-

from setuptools import find_packages, setup

extras_require = {
    "test": [
        "pytest>=6.2.5",
        "pytest-cov>=2.10",
        "pytest-xdist>=2.5",
        "hypothesis>=6.0",
    ],
    "lint": [
        "black==23.12.0",
        "flake8==6.1.0",
        "flake8-bugbear==23.12.2",
        "flake8-use-fstring==1.4",
        "isort==5.13.2",
        "mypy==1.5",
    ],
    "dev": ["ipython", "pre-commit", "twine"],
}

extras_require["dev"] = extras_require["test"] + extras_require["lint"] + extras_require["dev"]

with open("README.md", "r") as f:
    long_description = f.read()


setup(
    name="sollayout",
    version="0.1.0",
    description="sollayout: storage layout of Solidity contracts from the solc AST",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="sollayout contributors",
    author_email="",
    license="Apache License 2.0",
    keywords="ethereum evm solidity storage layout",
    include_package_data=True,
    packages=find_packages(include=["sollayout", "sollayout.*"]),
    python_requires=">=3.10,<4",
    install_requires=["pycryptodome>=3.5.1,<4"],
    tests_require=extras_require["test"],
    extras_require=extras_require,
    entry_points={
        "console_scripts": ["sollayout=sollayout.cli.sollayout_compile:_parse_cli_args"]
    },
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
