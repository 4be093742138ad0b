import sys

from resistor_calc.cli import main

sys.exit(main())
