"""Cleaners domain - Cleaner profiles, rates and tiers"""
