#!/usr/bin/env python3
"""
Activity Engine - python -m entry point.
"""

import sys

from activity_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
