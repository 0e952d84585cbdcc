"""Module entrypoint for ``python -m lazyssm``.

All argument parsing and runtime setup happen in ``lazyssm.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
