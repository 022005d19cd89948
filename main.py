#!/usr/bin/env python3
"""
TRR Buffer Planner - Entry point.

Run this to use the command-line calculator without installing the package.
"""
import sys
import multiprocessing
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from trr_buffer.cli import main

if __name__ == "__main__":
    # Required for ProcessPoolExecutor with the 'spawn' start method.
    multiprocessing.freeze_support()
    sys.exit(main())
