"""Availability domain - Service areas, unavailability windows and cleaner matching"""
