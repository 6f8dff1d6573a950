"""
pds4gen — render PDS4 labels from PDS3 labels and templates.

Tool identity is kept here so the CLI version banner and the default
config directory lookup share one source of truth.
"""

__version__ = "0.4.0"

TOOL_NAME = "PDS4 Generate Tool"
RELEASE_DATE = "2026-10-18"
COPYRIGHT = "Copyright (c) California Institute of Technology. All rights reserved."
