"""
Vote ledger package.

Responsibilities:
- Hold one user's Top Choice / Runner-Up selections per category and their
  single Overall Top Pick.
- Compute the signed point deltas for every vote transition.
- Persist ballots: the authenticated vote log, or the session for guests.
"""
