from .file_repository import FilePostRepository

__all__ = ["FilePostRepository"]
