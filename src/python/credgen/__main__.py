import sys

from credgen.generator import main

sys.exit(main())
