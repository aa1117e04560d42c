from .commonjs import CommonJsExportExtractor, has_commonjs_syntax
from .exports import EsModuleExportExtractor

__all__ = ["CommonJsExportExtractor", "EsModuleExportExtractor", "has_commonjs_syntax"]
