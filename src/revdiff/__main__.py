import sys

from revdiff.cli import main

sys.exit(main())
