import sys

from purler.cli import main

sys.exit(main())
