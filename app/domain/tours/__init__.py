"""Tour domain - Property tour scheduling"""
