#!/usr/bin/env python3
"""
Neptune realm builder / server supervisor

Usage:
    launcher.py generate <realm>
    launcher.py run <realm> <run-dir>
    launcher.py plan <realm>
    launcher.py api [--host H] [--port P]

Configuration comes from the environment (NEPTUNE_ROOT, LOG_LEVEL, ...);
see neptune/settings.py.
"""

import sys
from neptune.cli import main

if __name__ == "__main__":
    sys.exit(main())
