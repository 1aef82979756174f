"""Notification dispatch package.

Decides, for one event, which users hear about it, through which channels and
when, and hands the resulting messages to the delivery layer.
"""
