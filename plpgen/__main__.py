import sys

from plpgen.cli import main

sys.exit(main())
