"""tasklists: named task lists with due dates, persisted to local storage."""

__version__ = "0.1.0"
