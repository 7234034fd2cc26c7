"""Allows execution via: python -m loralux"""

import sys

from loralux.daemon import main

if __name__ == "__main__":
    sys.exit(main())
