"""python -m featurize"""

import sys

from featurize.cli import main

sys.exit(main())
