"""Backend for nvim-redraft: rewrites code snippets through an LLM provider."""

__version__ = "0.1.0"
