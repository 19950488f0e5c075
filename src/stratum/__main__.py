import sys

from stratum.cli._dispatcher import main

sys.exit(main())
