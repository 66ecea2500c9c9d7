#!/usr/bin/env python3
"""
Worktime Ledger - Main Entry Point

Logs daily active working hours from ActivityWatch into per-device ledgers
and merges them into one canonical record.
"""

import sys
from pathlib import Path

# Add the worktime_ledger package to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from worktime_ledger.cli import cli

if __name__ == '__main__':
    try:
        cli()
    except KeyboardInterrupt:
        print("\nProgram interrupted by user")
        sys.exit(1)
