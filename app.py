"""
Main NiceGUI application for TreeNotes.

Serves one page: a Cornell note beside a tree of connected boxes. Each
browser tab gets its own NoteDocument and InteractionController (see
treenotes/ui.py); nothing is shared between tabs.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

load_dotenv()

from treenotes.config import get_log_level, get_port
from treenotes.ui import TreeNotesPage

logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


@ui.page('/')
def main_page():
    ui.query('body').style('margin: 0; padding: 0;')
    TreeNotesPage()


if __name__ in {"__main__", "__mp_main__"}:
    port = get_port()
    logger.info(f"Starting TreeNotes on port {port}")
    ui.run(
        title='TreeNotes',
        port=port,
        reload=not getattr(sys, 'frozen', False),
    )
