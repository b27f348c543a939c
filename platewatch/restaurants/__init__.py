"""
Restaurant catalog.

Responsibilities:
- Load the seeded Albuquerque restaurant list into memory.
- Derive stable restaurant ids from name and location.
- Apply admin edits (recategorize, base points, delete) and manage
  user suggestions awaiting approval.
- Map place records from the external lookup into restaurants.
"""
