"""Allow running relnotes as ``python -m relnotes``."""

from relnotes.cli.app import main

if __name__ == "__main__":
    main()
