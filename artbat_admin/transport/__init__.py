"""File transports (FTP and local filesystem) behind one contract."""

from .base import RemoteEntry, TransferResult, Transport
from .ftp_client import FTPTransport
from .local_fs import LocalTransport

__all__ = ["RemoteEntry", "TransferResult", "Transport", "FTPTransport", "LocalTransport"]
