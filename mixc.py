#!/usr/bin/env python3
"""mixc: mixin composition and dispatch engine.

Thin entry point that delegates to src.composition.main.
"""

import sys

from src.composition.main import main

if __name__ == "__main__":
    sys.exit(main())
