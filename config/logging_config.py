"""Rich-handler logging preset."""
import logging
from typing import Optional
from rich.logging import RichHandler
from .app_config import get_settings

def configure(level: Optional[str] = None):
    level = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s │ %(name)-24s │ %(levelname)-8s │ %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, markup=False)],
    )
