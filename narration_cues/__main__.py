"""Package entry point for ``python -m narration_cues``.

WHY: Users run the pipeline as ``python -m narration_cues resolve ...``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from narration_cues.cli import main

if __name__ == "__main__":
    main()
