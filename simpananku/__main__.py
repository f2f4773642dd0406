import sys

from simpananku.main import main

sys.exit(main())
