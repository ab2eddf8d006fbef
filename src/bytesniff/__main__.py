"""Allow ``python -m bytesniff``."""

import sys

from .cli import main

sys.exit(main())
