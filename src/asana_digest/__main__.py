import sys

from asana_digest.digest import main

sys.exit(main())
