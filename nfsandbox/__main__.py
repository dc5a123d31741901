"""Module entrypoint for ``python -m nfsandbox``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and runtime setup happen in ``nfsandbox.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
