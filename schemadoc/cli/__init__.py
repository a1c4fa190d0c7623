from .__main__ import main
from .export_csv import main as export_main
from .import_sheets import main as import_main

__all__ = ["main", "export_main", "import_main"]
