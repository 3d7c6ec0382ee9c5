#!/usr/bin/env python3
"""
terracmd - Main entry point.

Runs the command-line interface from a source checkout.
"""

import sys

from terracmd.cli import main


if __name__ == "__main__":
    sys.exit(main())
