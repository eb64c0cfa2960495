"""Allow ``python -m stackrefresh``."""

from stackrefresh.cli.main import main

if __name__ == "__main__":
    main()
