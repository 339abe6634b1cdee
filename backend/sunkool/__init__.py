"""Sunkool order fulfillment core"""
