"""Pricing domain - Price engine and service catalog"""
