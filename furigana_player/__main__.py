"""Package entry point for ``python -m furigana_player``.

WHY: Users run ``python -m furigana_player subs.srt --at 12.5`` to print
the annotated subtitle, or ``python -m furigana_player --serve`` to start
the HTTP API.

HOW: Delegates to the CLI's main() function, which handles both modes.
"""

from furigana_player.cli import main

if __name__ == "__main__":
    main()
