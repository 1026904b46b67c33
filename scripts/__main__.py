"""Allow `python -m scripts` by running the ingest script."""

import sys

from scripts.ingest import main

sys.exit(main())
