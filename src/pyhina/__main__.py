import sys

from pyhina.cli import main

sys.exit(main())
