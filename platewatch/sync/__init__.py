"""
Community tally synchronisation.

Responsibilities:
- Push signed vote deltas to the shared counter store (best effort).
- Follow the store's snapshot stream and keep the last-known tally.
- Report whether the leaderboard is live or in local-only mode.
"""
