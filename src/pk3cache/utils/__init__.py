from .paths import safe_file_path, strip_ext

__all__ = ["safe_file_path", "strip_ext"]
