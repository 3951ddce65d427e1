"""Allow ``python -m hlserve``."""

import sys

from hlserve.cli import main

sys.exit(main())
