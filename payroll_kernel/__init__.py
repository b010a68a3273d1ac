"""
Payroll Kernel

Persistence, logging, error and time infrastructure for the payroll
calculation engine:
- Decimal-only money columns
- Flush-only services, read-only selectors
- Per-employee transactional settlement
- Structured JSON logging
"""

__version__ = "0.1.0"
