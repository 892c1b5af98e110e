"""Inmobi API - real estate listings, tours and AI assistance"""
