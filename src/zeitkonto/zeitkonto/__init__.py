"""Zeitkonto package.

Working-time back office organized by feature modules (days, overtime,
payouts, closing, ...) with a thin Flask controller layer over service and
repository layers. The reconciliation core (``timecalc`` and ``overtime``)
is pure and has no database or Flask imports.
"""
