"""
FastAPI Notes Backend package.

The ASGI application lives in `src.api.main` (`app`, or `create_app()` to build
one around an explicit NotesStore). The store itself is importable on its own
from `src.api.store` without pulling in the web layer.
"""
