"""Allow ``python -m formai.cli`` execution."""

import sys

from formai.cli.run import main

sys.exit(main())
