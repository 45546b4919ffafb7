"""Personal memo and task assistant: task storage, accounts, calendar, reports and a command line."""

__version__ = "0.1.0"