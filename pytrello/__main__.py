"""Allow ``python -m pytrello``."""

import sys

from pytrello.cli import main

sys.exit(main())
