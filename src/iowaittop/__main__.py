"""Allow running iowaittop with python -m iowaittop."""

from iowaittop.cli import main

main()
