#!/usr/bin/env python3
"""Entry point to run the job pipeline once (same as ``jobsift run``)."""
from __future__ import annotations

import sys

from jobsift.cli import main

if __name__ == "__main__":
    sys.exit(main(["run", *sys.argv[1:]]))
