"""Payments module - Stripe integration for online ordering."""
