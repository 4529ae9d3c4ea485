"""Allow running as ``python -m folderdiff``."""

import sys

from folderdiff.main import main

sys.exit(main())
