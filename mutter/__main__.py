"""Package entry point for ``python -m mutter``.

WHY: Users run the transcriber as ``python -m mutter talk.mp3`` without
needing the console script on PATH.

HOW: Delegates to the CLI's main() function.
"""

from mutter.cli import main

if __name__ == "__main__":
    main()
