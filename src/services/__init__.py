"""Business operations: profiles, claims, verification, bookings, ratings, ads, favorites and the audit log."""
