"""Addresses domain - Saved customer addresses and the default address"""
