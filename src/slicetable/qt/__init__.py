"""Qt boundary layer; importing it requires PySide6."""

from .table_model import SliceTableModel, TableRoles

__all__ = ["SliceTableModel", "TableRoles"]
