"""Scholar MCP: paper search, PDF download and Kimi FAQ lookup over Cool Papers, arXiv and DBLP."""

__version__ = "2.0.0"
