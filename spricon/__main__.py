import sys

from spricon.build import main

sys.exit(main())
