import sys

from driftline.run import main

sys.exit(main())
