"""
LedgerGate: identity lifecycle and transaction gateway for permissioned ledgers

LedgerGate registers, enrolls and caches per-user identities with each
organization's certificate authority and submits chaincode transactions on
behalf of those identities.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh.readlines() if line.strip() and not line.startswith("#")]

# Get version from the package
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '.'))
from ledgergate.units.version import get_version, VERSION

setup(
    name="LedgerGate",
    version=get_version(VERSION),
    author="Nguyễn Lê Văn Dũng",
    description="Identity lifecycle management and transaction gateway for permissioned ledger networks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['ledgergate', 'ledgergate.*'], exclude=['tests*']),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0", "hypothesis>=6.0"],
    },
    entry_points={
        "console_scripts": [
            "lgw=ledgergate.cli:lgw",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security :: Cryptography",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    keywords="blockchain, hyperledger, fabric, identity, wallet, gateway",
)
