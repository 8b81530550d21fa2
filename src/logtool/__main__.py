"""Module entrypoint.

Allows:
    python -m logtool --logname myapp < app-output.txt
"""

from __future__ import annotations

from logtool.cli import main

if __name__ == "__main__":
    main()
