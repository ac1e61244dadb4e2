import sys

from operator_health.cli import main

sys.exit(main())
