"""Entry point for python -m castore."""

from .cli import main

if __name__ == "__main__":
    main()
