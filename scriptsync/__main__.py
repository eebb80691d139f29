"""Package entry point for ``python -m scriptsync``.

Delegates to the CLI's main(); see scriptsync.cli for the subcommands.
"""

from scriptsync.cli import main

if __name__ == "__main__":
    main()
