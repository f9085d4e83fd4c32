"""Allow `python -m st80`"""

from st80.cli import main

main()
