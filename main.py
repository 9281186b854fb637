"""
epoch_sort – Main entry point.

Thin wrapper so the converter can be started from the project root:

    python main.py --input-dir exports/ --output-dir converted/
"""

import sys

from actions.convert_csv_epoch_time import main


if __name__ == "__main__":
    sys.exit(main())
