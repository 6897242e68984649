import sys

from clinic.console.app import main

if __name__ == "__main__":
    sys.exit(main())
