import sys
from token_aggregator.cli import main

sys.exit(main())
