"""LinkedIn job scraping with LLM fit filtering and a spreadsheet-backed tracker."""

__version__ = "0.3.0"
