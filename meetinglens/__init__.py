"""MeetingLens: meeting transcript summarization and grounded Q&A."""

__version__ = "0.3.0"
