"""Errors raised by the booking workflow and the availability ledger."""

from __future__ import annotations

from shared.domain.exceptions import (
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)


class PropertyNotFound(NotFoundError):
    error_code = "PROPERTY_NOT_FOUND"
    default_message = "Property not found or not available for booking."


class BookingNotFound(NotFoundError):
    error_code = "BOOKING_NOT_FOUND"
    default_message = "Booking not found."


class DatesUnavailable(BusinessRuleError):
    error_code = "DATES_UNAVAILABLE"
    default_message = "The property is not available for the selected dates."


class AlreadyCancelled(ConflictError):
    error_code = "BOOKING_ALREADY_CANCELLED"
    default_message = "This booking has already been cancelled."


class InvalidStatusTransition(ConflictError):
    error_code = "INVALID_STATUS_TRANSITION"
    default_message = "The booking cannot move to the requested status."


class DateHeldByBooking(ConflictError):
    error_code = "DATE_HELD_BY_BOOKING"
    default_message = "The date is held by a confirmed booking."


class NotBookingHost(PermissionDeniedError):
    error_code = "NOT_BOOKING_HOST"
    default_message = "Only the host of the property can perform this action."
