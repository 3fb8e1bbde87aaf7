"""Bookings domain - Booking lifecycle and listings"""
