"""
Entry point for running tvconvert as a module: python -m tvconvert

    python -m tvconvert --config movies.json
    python -m tvconvert --print-config movies.json
"""

import sys

from tvconvert.cli import main

if __name__ == "__main__":
    sys.exit(main())
