"""Allow ``python -m protorebuild``."""

from protorebuild.cli import main

if __name__ == "__main__":
    main()
