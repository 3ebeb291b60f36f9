"""
ballot-stats CLI - governance participation audit

Commands:
- ballot-stats count - Replay ballots and print per-voter statistics
- ballot-stats events - List the classified governance event stream
- ballot-stats version - Show version information
"""

__version__ = "0.3.0"
