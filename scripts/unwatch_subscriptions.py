#!/usr/bin/env python3
"""Script to interactively unwatch GitHub repositories."""

import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from unwatch.cli import main


if __name__ == "__main__":
    sys.exit(main())
