from .documents import add_documents_routes
from .files import add_files_routes
from .sessions import add_sessions_routes
from .verification import add_verification_routes

__all__ = [
    "add_documents_routes",
    "add_files_routes",
    "add_sessions_routes",
    "add_verification_routes",
]
