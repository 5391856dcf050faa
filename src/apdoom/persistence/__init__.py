"""Save/restore of the session state.

- ``codec``: the ``apstate.json`` document and the field-by-field merge on load
- ``manager``: atomic disk I/O with a ``.bak`` fallback
- ``paths``: per-seed save directory naming and the platform default root
"""

from .codec import SAVE_VERSION, apply_state, decode_text, encode_state, encode_text
from .manager import SaveManager
from .paths import default_save_root, resolve_save_dir, save_dir_string, save_folder_name, string_to_hex

__all__ = [
    "SAVE_VERSION",
    "SaveManager",
    "apply_state",
    "decode_text",
    "default_save_root",
    "encode_state",
    "encode_text",
    "resolve_save_dir",
    "save_dir_string",
    "save_folder_name",
    "string_to_hex",
]
