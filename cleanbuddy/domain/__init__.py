"""Domain packages - one per bounded area (pricing, availability, bookings, ...)"""
