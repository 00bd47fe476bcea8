import sys

from vmclean.cli import main

sys.exit(main())
