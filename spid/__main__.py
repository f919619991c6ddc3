"""Allow ``python -m spid``."""

from spid import main

main()
