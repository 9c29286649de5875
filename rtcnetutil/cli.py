"""Command that lists the local network interface addresses."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .errors import UtilError
from .ifaces import ifaces


def main(argv: Optional[List[str]] = None) -> int:
    """Print each interface address with its index; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="rtcnetutil", description="Display the local network interfaces."
    )
    parser.parse_args(argv)
    try:
        interfaces = ifaces()
    except UtilError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for index, interface in enumerate(interfaces):
        print(f"{index} {interface!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())