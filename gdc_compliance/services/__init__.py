from .file_service import FileService, FileTooLargeError, UnsupportedFileError
from .llm_service import get_llm, llm_text_call, reset_llm

__all__ = [
    "FileService",
    "FileTooLargeError",
    "UnsupportedFileError",
    "get_llm",
    "llm_text_call",
    "reset_llm",
]
