"""MailMind Archive: import, classify and search email archives with a local LLM."""

__version__ = "0.1.0"
