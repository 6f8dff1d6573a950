"""
Static data shipped with the package.

``flags.yml`` holds the command-line flag catalog read by
``pds4gen.core.config.flags``.
"""

from pathlib import Path

DATA_DIR = Path(__file__).parent
