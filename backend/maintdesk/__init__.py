"""MaintDesk - facility maintenance report lifecycle and admin views"""

__version__ = "1.0.0"
