"""Database base, engine and session helpers"""
