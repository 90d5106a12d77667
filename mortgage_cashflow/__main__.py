import sys

from mortgage_cashflow.cli import main

sys.exit(main())
