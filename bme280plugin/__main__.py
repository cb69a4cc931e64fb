#!/usr/bin/env python3
"""
Entry point for running bme280plugin as a module.

Usage: python -m bme280plugin [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
