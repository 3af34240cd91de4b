"""Data persistence components."""

from .hosts_file import HostsEntry, HostsFileReconciler, HostsFileUpdate, format_preview
from .label_store import LabelEntry, LabelStore

__all__ = [
    "HostsEntry",
    "HostsFileReconciler",
    "HostsFileUpdate",
    "LabelEntry",
    "LabelStore",
    "format_preview",
]
