from dotenv import load_dotenv
load_dotenv()

import sys

from edit_history.cli import main

if __name__ == "__main__":
    sys.exit(main())
