"""Allow running as: python -m gdc_compliance"""

import sys

from gdc_compliance.main import main

if __name__ == "__main__":
    sys.exit(main())
