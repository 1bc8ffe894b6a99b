from .runner import Command, RunReport, format_settings, read_commands, run_commands

__all__ = ["Command", "RunReport", "format_settings", "read_commands", "run_commands"]
