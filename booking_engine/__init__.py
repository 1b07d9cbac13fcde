"""Availability and recurrence scheduling engine"""
