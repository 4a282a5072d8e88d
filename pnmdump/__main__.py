"""Allow ``python -m pnmdump``."""

import sys

from pnmdump.cli import main

sys.exit(main())
