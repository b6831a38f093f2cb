"""
Backend Scripts Module

Available scripts:
    - seed_data.py: Creates sample staff, reports and support tickets

Usage:
    python -m scripts.seed_data
"""
