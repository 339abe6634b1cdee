"""Core configuration and status rules"""
