"""
Medical Transport Coordination Module

This module provides the transport coordination core:
- Tiered trip pricing
- Guarded request lifecycle with completion history
- Participant rewards and the derived trust/credit score
- Domain events turned into user-facing notifications
- In-memory and PostgreSQL storage adapters
"""

__version__ = "1.0.0"
