"""
Leaderboard scoring.

Responsibilities:
- Combine base points, the community tally and the viewer's own ballot
  into one total per restaurant.
- Filter, group, sort and page restaurants for the leaderboard views.
"""
