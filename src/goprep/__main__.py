"""Allow running goprep as ``python -m goprep``."""

import sys

from goprep.cli import main

sys.exit(main())
