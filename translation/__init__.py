"""
Translation Service Module

Korean to Uzbek (Latin script) translation with validated retries.
"""

from .service import router

__all__ = ["router"]
