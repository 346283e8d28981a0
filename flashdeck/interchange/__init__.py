from .apkg import build_apkg, export_apkg, import_apkg, read_apkg
from .backup import Backup, default_backup_path, export_backup, import_backup
from .detect import ImportFormat, detect_format, import_anki
from .markup import strip_html
from .text_import import (
    filename_to_title_case,
    import_anki_text,
    import_csv,
    import_folder,
)

__all__ = [
    "Backup",
    "ImportFormat",
    "build_apkg",
    "default_backup_path",
    "detect_format",
    "export_apkg",
    "export_backup",
    "filename_to_title_case",
    "import_anki",
    "import_anki_text",
    "import_apkg",
    "import_backup",
    "import_csv",
    "import_folder",
    "read_apkg",
    "strip_html",
]
