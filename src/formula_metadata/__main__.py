"""Allow running as ``python -m formula_metadata``."""

import sys

from formula_metadata.cli import main

if __name__ == "__main__":
    sys.exit(main())
