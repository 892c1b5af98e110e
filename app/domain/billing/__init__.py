"""Billing domain - Subscription tiers"""
