import sys

from satplan.satplan import main

sys.exit(main())
