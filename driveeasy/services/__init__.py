"""Business logic: accounts, sessions, authorization, bookings, notifications."""
