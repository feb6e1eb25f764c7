import sys

from postgres_metrics.cli import main

sys.exit(main())
