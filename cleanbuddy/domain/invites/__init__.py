"""Invites domain - Company-issued cleaner invites"""
