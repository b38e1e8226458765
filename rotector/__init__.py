"""Components for a moderation pipeline: progress display, text decoding, Redis queues and statistics, log management, and concurrent fetchers."""

__version__ = "0.1.0"