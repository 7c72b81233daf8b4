"""PromptReel — prompt-to-video generation service."""

__version__ = "0.1.0"
