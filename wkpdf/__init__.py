"""
wkpdf - HTML to PDF conversion through the wkhtmltopdf command-line tool.

Architecture:
- Document Context: Source handling, switch bookkeeping and fluent page setup
- Rendering Context: Command-line construction and wkhtmltopdf process management
"""

__version__ = "0.1.0"
