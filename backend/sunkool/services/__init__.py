"""Order fulfillment services"""
