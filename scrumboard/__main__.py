"""Allow running as: python -m scrumboard"""

from .cli import main

main()
