import sys

from snapfit.cli import main

sys.exit(main())
