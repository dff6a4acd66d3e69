#!/usr/bin/env python3
"""
Entry point for running xmix as a module.

Usage:
    python -m xmix [--host H] [--port P] status|query|send|recall|fader ...
"""

import sys

from xmix.cli import main

sys.exit(main())
