"""
Label generation package: template rendering, QR/barcode rasters, PDF merging.
"""

from labelprint.label_generation.code_generator import CodeGenerator, CodeGenerationError
from labelprint.label_generation.pdf_renderer import LabelPDFRenderer
from labelprint.label_generation.pdf_merge import merge_pdfs, count_pages

__all__ = ["CodeGenerator", "CodeGenerationError", "LabelPDFRenderer", "merge_pdfs", "count_pages"]
