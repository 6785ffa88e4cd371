"""Entry point for ``python -m bounce``."""

import sys

from bounce.cli import main

sys.exit(main())
