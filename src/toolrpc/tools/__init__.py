"""Built-in tools."""

from toolrpc.tools.directory_list import DirectoryList
from toolrpc.tools.directory_make import DirectoryMake
from toolrpc.tools.file_diff import FileDiff
from toolrpc.tools.file_find import FileFind
from toolrpc.tools.file_grep import FileGrep
from toolrpc.tools.file_move import FileMove
from toolrpc.tools.file_patch import FilePatch
from toolrpc.tools.file_read import FileRead
from toolrpc.tools.file_write import FileWrite
from toolrpc.tools.shell import Shell

__all__ = [
    "DirectoryList",
    "DirectoryMake",
    "FileDiff",
    "FileFind",
    "FileGrep",
    "FileMove",
    "FilePatch",
    "FileRead",
    "FileWrite",
    "Shell",
]
