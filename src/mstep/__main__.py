"""Allow ``python -m mstep``."""

import sys

from mstep.cli import main

sys.exit(main())
