"""
Ballot Stats

Replays governance events from a permissioned ledger and reports how often
each authorized voting key took part in ballots.
"""

__version__ = "0.3.0"
