"""EMI calculator: amortization schedules and loan what-if scenarios."""

__version__ = "0.1.0"
