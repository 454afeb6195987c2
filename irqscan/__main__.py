"""Allow running as python -m irqscan."""

import sys

from irqscan.cli import main

sys.exit(main())
