"""School Attendance package.

Feature modules (attendance, quota, qr, reconciliation, ...) keep business
rules in services over repository interfaces, with a thin Flask controller
layer on top.
"""
