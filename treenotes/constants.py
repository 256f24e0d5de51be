"""
Shared defaults for the TreeNotes editor.

These values are used by the graph store, the interaction controller and the
NiceGUI shell. Box sizes must match the CSS in treenotes/ui.py.
"""

# Fill color applied to new boxes and used when a color cannot be parsed
DEFAULT_BOX_COLOR = "#F1F1F1"

# Text placed in a box created from the toolbar
DEFAULT_BOX_CONTENT = "New Box"

# ID and position of the box every fresh tree starts with
SEED_NODE_ID = "1"
SEED_POSITION = (0.0, 0.0)

# Rendered box size in px, used to compute line endpoints (box centers)
BOX_WIDTH = 120.0
BOX_HEIGHT = 40.0

# Highlight color given to a cue-text span that is linked before being colored
DEFAULT_HIGHLIGHT_COLOR = "#FFFF00"

# File name offered when the document is downloaded
EXPORT_FILENAME = "treenotes.json"
