"""Bookings app: stays, their lifecycle and the availability ledger."""
