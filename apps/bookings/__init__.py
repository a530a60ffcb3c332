"""Bookings app package.

This app holds the reservation engine: availability checks, pricing,
short-lived reservation locks and the handlers that create and update
bookings. Overlapping bookings are prevented by serializing creation per
property and date range and, on PostgreSQL, by exclusion constraints.
"""
