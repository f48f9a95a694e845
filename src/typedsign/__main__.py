import sys

from typedsign.main import main

sys.exit(main())
