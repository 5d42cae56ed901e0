"""
Module entry-point that makes the package runnable with

    python -m gcode_looper

Behaviour is identical to the *3mf-gcode-looper* console script.
"""

from gcode_looper.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
