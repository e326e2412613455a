"""Labour portal package.

Organized by feature modules (users, projects, timesheets, invoices, ...) with a
thin Flask JSON controller layer over service/repository layers. Hour splitting
and money arithmetic live in ``payroll``.
"""
