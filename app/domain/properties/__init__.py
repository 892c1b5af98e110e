"""Property domain - Listings, search and AI-assisted discovery"""
