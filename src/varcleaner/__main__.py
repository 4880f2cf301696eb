"""Entry point for running varcleaner as a module.

Usage: python -m varcleaner
"""

import sys

from . import main

if __name__ == "__main__":
    sys.exit(main())
