"""
Version utility functions for LedgerGate.
"""

from typing import Tuple

VERSION = (0, 1, 0, "final", 0)


def get_version(version: Tuple[int, int, int, str, int] = VERSION) -> str:
    """
    Return a PEP 440-compliant version number.

    Args:
        version: Version tuple (major, minor, micro, releaselevel, serial)

    Returns:
        Version string, e.g. "0.1.0", "0.2.0.dev1" or "1.0.0rc2"
    """
    major, minor, micro, releaselevel, serial = version

    version_str = f"{major}.{minor}.{micro}"
    if releaselevel == "dev":
        version_str += f".dev{serial}"
    elif releaselevel != "final":
        version_str += {"alpha": "a", "beta": "b", "rc": "rc"}[releaselevel] + str(serial)

    return version_str
