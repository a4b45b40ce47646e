import sys

from modctl.cli._dispatcher import main

sys.exit(main())
